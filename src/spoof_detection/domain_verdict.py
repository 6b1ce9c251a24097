# src/spoof_detection/domain_verdict.py

import logging
from typing import Optional

from .models import DomainReport, DomainVerdict, SpfEvaluation
from .protocol_checks import RecordFetcher, ask
from .spf import evaluate_spf

logger = logging.getLogger(__name__)

DMARC_REJECT = "p=reject"
DMARC_QUARANTINE = "p=quarantine"


def calculate_domain_verdict(exists: bool, spf: SpfEvaluation, dmarc: Optional[str]) -> DomainVerdict:
    """
    Grade a domain's sender policy.

    First match wins:
      domain missing             -> Invalid
      -all and DMARC p=reject    -> Strong
      DMARC p=reject             -> Medium
      ~all / ?all                -> Medium
      anything else              -> Weak

    ``p=quarantine`` is recognised but does not raise the grade.
    """
    if not exists:
        return DomainVerdict.INVALID

    policy = dmarc or ""
    dmarc_strong = DMARC_REJECT in policy
    dmarc_medium = DMARC_QUARANTINE in policy
    if dmarc_medium and not dmarc_strong:
        logger.debug("DMARC quarantine policy does not affect the domain grade")

    if spf.has_strict_all and dmarc_strong:
        return DomainVerdict.STRONG
    if dmarc_strong:
        return DomainVerdict.MEDIUM
    if spf.has_soft_all:
        return DomainVerdict.MEDIUM
    return DomainVerdict.WEAK


def resolve_dkim(fetcher: RecordFetcher, domain: str) -> bool:
    """True if one of the known DKIM selectors is published for ``domain``."""
    return ask(fetcher.resolve_dkim_selector, domain, False)


def analyze_domain(fetcher: RecordFetcher, domain: str) -> DomainReport:
    """Gather existence, SPF, DKIM and DMARC evidence for a bare domain and grade it."""
    exists = ask(fetcher.domain_exists, domain, False)
    spf = evaluate_spf(fetcher, domain, 0)
    dkim = resolve_dkim(fetcher, domain)
    dmarc = ask(fetcher.resolve_dmarc, domain, None)

    verdict = calculate_domain_verdict(exists, spf, dmarc)
    logger.info("Domain %s: %s", domain, verdict.value)
    return DomainReport(domain=domain, exists=exists, spf=spf, dmarc=dmarc, dkim=dkim, verdict=verdict)
