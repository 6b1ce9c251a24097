"""
Pytest configuration and fixtures for all tests.
"""

import pytest

from spoof_detection.protocol_checks import RecordFetcher


class FakeFetcher(RecordFetcher):
    """Deterministic stand-in for DNS; records every lookup it answers."""

    def __init__(self, spf=None, dmarc=None, existing=(), dkim=()):
        self.spf = dict(spf or {})
        self.dmarc = dict(dmarc or {})
        self.existing = set(existing)
        self.dkim = set(dkim)
        self.calls = []

    def resolve_spf(self, domain):
        self.calls.append(("spf", domain))
        return self.spf.get(domain)

    def resolve_dmarc(self, domain):
        self.calls.append(("dmarc", domain))
        return self.dmarc.get(domain)

    def domain_exists(self, domain):
        self.calls.append(("exists", domain))
        return domain in self.existing

    def resolve_dkim_selector(self, domain):
        self.calls.append(("dkim", domain))
        return domain in self.dkim


class BrokenFetcher(RecordFetcher):
    """Fetcher whose every lookup blows up."""

    def resolve_spf(self, domain):
        raise RuntimeError("network down")

    def resolve_dmarc(self, domain):
        raise RuntimeError("network down")

    def domain_exists(self, domain):
        raise RuntimeError("network down")

    def resolve_dkim_selector(self, domain):
        raise RuntimeError("network down")


@pytest.fixture
def example_fetcher():
    """example.com and misaligned.com publish -all and p=reject; nothing else exists."""
    return FakeFetcher(
        spf={"example.com": "v=spf1 -all", "misaligned.com": "v=spf1 -all"},
        dmarc={"example.com": "v=DMARC1; p=reject", "misaligned.com": "v=DMARC1; p=reject"},
        existing={"example.com", "misaligned.com"},
        dkim={"example.com"},
    )


@pytest.fixture
def fake_fetcher_cls():
    return FakeFetcher


@pytest.fixture
def broken_fetcher():
    return BrokenFetcher()
