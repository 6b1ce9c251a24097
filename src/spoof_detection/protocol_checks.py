# src/spoof_detection/protocol_checks.py

"""
DNS lookups behind the verdict engine.

RecordFetcher is the seam between the verdict logic and the network: the
analysers only ever talk to this interface, so tests can hand in a fake.
DnsRecordFetcher is the dnspython implementation. It never raises from a
lookup; every DNS failure comes back as "no record" / False.
"""

import abc
import logging
from typing import Callable, List, Optional, Sequence, TypeVar

import dns.exception
import dns.resolver
import idna

from .config import Settings
from .errors import ResolverInitError

logger = logging.getLogger(__name__)

SPF_PREFIX = "v=spf1"
DMARC_PREFIX = "v=DMARC1"

T = TypeVar("T")


def to_ascii_domain(domain: Optional[str]) -> Optional[str]:
    """
    IDNA-normalize a domain name. Returns None when the name cannot be encoded.

    Plain ASCII names are only lowercased so that labels such as ``_spf`` survive.
    """
    if domain is None:
        return None
    name = domain.strip().rstrip(".")
    if not name:
        return None
    if name.isascii():
        return name.lower()
    try:
        return idna.encode(name, uts46=True).decode("ascii")
    except idna.IDNAError:
        return None


def ask(lookup: Callable[[str], T], domain: str, default: T) -> T:
    """Run one fetcher lookup; any failure is logged and read as ``default``."""
    try:
        return lookup(domain)
    except Exception as e:
        logger.warning("%s(%s) failed: %s", getattr(lookup, "__name__", "lookup"), domain, e)
        return default


class RecordFetcher(abc.ABC):
    """Capability set the analysers need from DNS."""

    @abc.abstractmethod
    def resolve_spf(self, domain: str) -> Optional[str]:
        """First TXT record at ``domain`` starting with ``v=spf1``."""

    @abc.abstractmethod
    def resolve_dmarc(self, domain: str) -> Optional[str]:
        """First TXT record at ``_dmarc.<domain>`` starting with ``v=DMARC1``."""

    @abc.abstractmethod
    def domain_exists(self, domain: str) -> bool:
        """True if the domain has A, AAAA or MX records."""

    @abc.abstractmethod
    def resolve_dkim_selector(self, domain: str) -> bool:
        """True if any known selector has a TXT record under ``_domainkey``."""


class DnsRecordFetcher(RecordFetcher):
    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or Settings()
        self.selectors: Sequence[str] = settings.dkim_selectors
        try:
            if settings.nameservers:
                resolver = dns.resolver.Resolver(configure=False)
                resolver.nameservers = list(settings.nameservers)
            else:
                resolver = dns.resolver.Resolver()
        except (dns.resolver.NoResolverConfiguration, OSError, ValueError) as e:
            raise ResolverInitError(f"cannot configure DNS resolver: {e}") from e
        resolver.timeout = settings.dns_timeout
        resolver.lifetime = settings.dns_lifetime
        self.resolver = resolver

    def _query(self, name: str, rtype: str) -> list:
        try:
            return list(self.resolver.resolve(name, rtype))
        except dns.resolver.NXDOMAIN:
            logger.debug("%s %s: NXDOMAIN", rtype, name)
        except dns.resolver.NoAnswer:
            logger.debug("%s %s: no answer", rtype, name)
        except dns.exception.Timeout:
            logger.debug("%s %s: timeout", rtype, name)
        except dns.exception.DNSException as e:
            logger.debug("%s %s failed: %s", rtype, name, e)
        return []

    def resolve_txt(self, name: str) -> List[str]:
        """TXT records at ``name``; character-strings of one record are joined."""
        return [
            b"".join(r.strings).decode("utf-8", errors="replace")
            for r in self._query(name, "TXT")
        ]

    def _first_txt(self, name: str, prefix: str) -> Optional[str]:
        for txt in self.resolve_txt(name):
            if txt.startswith(prefix):
                return txt
        return None

    def resolve_spf(self, domain: str) -> Optional[str]:
        name = to_ascii_domain(domain)
        if name is None:
            return None
        return self._first_txt(name, SPF_PREFIX)

    def resolve_dmarc(self, domain: str) -> Optional[str]:
        name = to_ascii_domain(domain)
        if name is None:
            return None
        return self._first_txt(f"_dmarc.{name}", DMARC_PREFIX)

    def domain_exists(self, domain: str) -> bool:
        name = to_ascii_domain(domain)
        if name is None:
            logger.debug("not a valid domain name: %r", domain)
            return False
        return any(self._query(name, rtype) for rtype in ("A", "AAAA", "MX"))

    def resolve_dkim_selector(self, domain: str) -> bool:
        name = to_ascii_domain(domain)
        if name is None:
            return False
        for selector in self.selectors:
            if self.resolve_txt(f"{selector}._domainkey.{name}"):
                logger.debug("DKIM selector found: %s", selector)
                return True
        return False
