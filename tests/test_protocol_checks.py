"""
Tests for the dnspython-backed record fetcher (resolver mocked, no network).
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import dns.exception
import dns.resolver
import pytest

from spoof_detection.config import Settings
from spoof_detection.errors import ResolverInitError
from spoof_detection.protocol_checks import DnsRecordFetcher, ask, to_ascii_domain


def _txt(*chunks):
    return SimpleNamespace(strings=tuple(chunks))


def _fetcher(answers, **settings):
    """
    Fetcher whose resolver answers from ``answers``: {(name, rtype): list | exception}.
    Unlisted queries raise NXDOMAIN.
    """
    fetcher = DnsRecordFetcher(Settings(nameservers=("192.0.2.53",), **settings))

    def resolve(name, rtype):
        answer = answers.get((name, rtype), dns.resolver.NXDOMAIN())
        if isinstance(answer, Exception):
            raise answer
        return answer

    fetcher.resolver.resolve = MagicMock(side_effect=resolve)
    return fetcher


class TestToAsciiDomain:

    def test_ascii_is_lowercased(self):
        assert to_ascii_domain("Example.COM.") == "example.com"

    def test_underscore_labels_survive(self):
        assert to_ascii_domain("_spf.google.com") == "_spf.google.com"

    def test_unicode_is_punycoded(self):
        assert to_ascii_domain("bücher.example") == "xn--bcher-kva.example"

    @pytest.mark.parametrize("value", [None, "", "  ", "\u0301abc.example"])
    def test_unencodable(self, value):
        assert to_ascii_domain(value) is None


class TestConstruction:

    def test_settings_applied(self):
        fetcher = DnsRecordFetcher(Settings(nameservers=("192.0.2.53",), dns_timeout=1.5, dns_lifetime=3.0))

        assert fetcher.resolver.timeout == 1.5
        assert fetcher.resolver.lifetime == 3.0

    def test_no_system_configuration(self):
        with patch("dns.resolver.Resolver", side_effect=dns.resolver.NoResolverConfiguration()):
            with pytest.raises(ResolverInitError):
                DnsRecordFetcher(Settings())


class TestTxtLookups:

    def test_spf_picks_first_spf_record(self):
        fetcher = _fetcher({("example.com", "TXT"): [
            _txt(b"google-site-verification=abc"),
            _txt(b"v=spf1 include:_spf.google.com ~all"),
            _txt(b"v=spf1 -all"),
        ]})
        assert fetcher.resolve_spf("example.com") == "v=spf1 include:_spf.google.com ~all"

    def test_character_strings_are_joined(self):
        fetcher = _fetcher({("example.com", "TXT"): [_txt(b"v=spf1 ip4:192.0.2.1 ", b"-all")]})
        assert fetcher.resolve_spf("example.com") == "v=spf1 ip4:192.0.2.1 -all"

    def test_spf_name_is_normalized(self):
        fetcher = _fetcher({("xn--bcher-kva.example", "TXT"): [_txt(b"v=spf1 -all")]})
        assert fetcher.resolve_spf("Bücher.example") == "v=spf1 -all"

    @pytest.mark.parametrize("error", [
        dns.resolver.NXDOMAIN(),
        dns.resolver.NoAnswer(),
        dns.exception.Timeout(),
        dns.resolver.NoNameservers(),
    ])
    def test_lookup_failures_mean_no_record(self, error):
        fetcher = _fetcher({("example.com", "TXT"): error})
        assert fetcher.resolve_spf("example.com") is None

    def test_dmarc_is_read_from_underscore_name(self):
        fetcher = _fetcher({("_dmarc.example.com", "TXT"): [
            _txt(b"unrelated"),
            _txt(b"v=DMARC1; p=reject"),
        ]})
        assert fetcher.resolve_dmarc("example.com") == "v=DMARC1; p=reject"
        fetcher.resolver.resolve.assert_any_call("_dmarc.example.com", "TXT")

    def test_dmarc_prefix_required(self):
        fetcher = _fetcher({("_dmarc.example.com", "TXT"): [_txt(b"v=dmarc1; p=reject")]})
        assert fetcher.resolve_dmarc("example.com") is None


class TestDomainExists:

    def test_mx_only_is_enough(self):
        fetcher = _fetcher({
            ("example.com", "A"): dns.resolver.NoAnswer(),
            ("example.com", "AAAA"): dns.resolver.NoAnswer(),
            ("example.com", "MX"): [object()],
        })
        assert fetcher.domain_exists("example.com") is True

    def test_a_record_short_circuits(self):
        fetcher = _fetcher({("example.com", "A"): [object()]})

        assert fetcher.domain_exists("example.com") is True
        assert fetcher.resolver.resolve.call_count == 1

    def test_nothing_resolves(self):
        assert _fetcher({}).domain_exists("nope.invalid") is False

    def test_invalid_idn_is_false_without_query(self):
        fetcher = _fetcher({})

        assert fetcher.domain_exists("\u0301abc.example") is False
        fetcher.resolver.resolve.assert_not_called()


class TestDkimSelector:

    def test_first_published_selector_wins(self):
        fetcher = _fetcher({("google._domainkey.example.com", "TXT"): [_txt(b"v=DKIM1; k=rsa; p=MIIB")]})

        assert fetcher.resolve_dkim_selector("example.com") is True
        names = [c.args[0] for c in fetcher.resolver.resolve.call_args_list]
        assert names == ["default._domainkey.example.com", "google._domainkey.example.com"]

    def test_exhausts_selector_list(self):
        fetcher = _fetcher({})

        assert fetcher.resolve_dkim_selector("example.com") is False
        assert fetcher.resolver.resolve.call_count == 4

    def test_configured_selectors(self):
        fetcher = _fetcher({("s2024._domainkey.example.com", "TXT"): [_txt(b"p=abc")]},
                           dkim_selectors=("s2024",))
        assert fetcher.resolve_dkim_selector("example.com") is True


class TestAsk:

    def test_returns_lookup_value(self):
        assert ask(lambda d: d.upper(), "a.test", None) == "A.TEST"

    def test_failure_returns_default(self):
        def boom(domain):
            raise RuntimeError("down")

        assert ask(boom, "a.test", False) is False
