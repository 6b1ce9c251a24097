# src/spoof_detection/detector.py

import dataclasses
import logging
from typing import Optional

from .domain_verdict import analyze_domain
from .models import AnalysisResult, DomainReport, EmailParsed, Evidence, Verdict
from .parser import extract_domain, parse_email
from .protocol_checks import RecordFetcher, ask

logger = logging.getLogger(__name__)


def decide_verdict(from_domain: Optional[str], spf: Optional[str], dmarc: Optional[str],
                   dkim_present: bool, alignment_ok: bool, domain_valid: bool) -> Verdict:
    """
    Reduce the evidence to a verdict. First match wins:
      sender domain does not exist              -> Suspicious
      DMARC p=reject and not aligned            -> PolicyViolation
      no SPF, no DMARC, no DKIM                 -> Unauthenticated
      DKIM present and aligned                  -> Authenticated
      anything else                             -> Suspicious
    """
    if not domain_valid:
        return Verdict.SUSPICIOUS

    if dmarc is not None and "p=reject" in dmarc and not alignment_ok:
        return Verdict.POLICY_VIOLATION

    if spf is None and dmarc is None and not dkim_present:
        return Verdict.UNAUTHENTICATED

    if dkim_present and alignment_ok:
        return Verdict.AUTHENTICATED

    return Verdict.SUSPICIOUS


def analyze_email(parsed: EmailParsed, fetcher: RecordFetcher) -> AnalysisResult:
    """
    Look up the From domain's SPF and DMARC records and grade the message.

    Only the top-level SPF record is consulted here (no include: expansion).
    Alignment is approximated by "an SPF record exists and it contains -all";
    Return-Path and Authentication-Results are not compared against anything.
    """
    from_domain = extract_domain(parsed.from_address)

    spf_policy = None
    dmarc_policy = None
    domain_valid = False
    if from_domain is not None:
        spf_policy = ask(fetcher.resolve_spf, from_domain, None)
        dmarc_policy = ask(fetcher.resolve_dmarc, from_domain, None)
        domain_valid = ask(fetcher.domain_exists, from_domain, False)

    alignment_ok = from_domain is not None and spf_policy is not None and "-all" in spf_policy
    spf_authorized = alignment_ok
    dkim_present = parsed.dkim_present

    verdict = decide_verdict(from_domain, spf_policy, dmarc_policy, dkim_present, alignment_ok, domain_valid)
    logger.info("Message from %s: %s", from_domain or "<unknown>", verdict.value)

    return AnalysisResult(
        verdict=verdict,
        evidence=Evidence(
            from_domain=from_domain,
            spf_policy=spf_policy,
            dmarc_policy=dmarc_policy,
            spf_authorized=spf_authorized,
            dkim_present=dkim_present,
            alignment_ok=alignment_ok,
            domain_valid=domain_valid,
        ),
    )


class Detector:
    """Entry points for the CLI and the HTTP API, bound to one RecordFetcher."""

    def __init__(self, fetcher: RecordFetcher):
        self.fetcher = fetcher

    def analyze_raw(self, raw_bytes: bytes, from_override: Optional[str] = None) -> AnalysisResult:
        """
        Parse a raw message and analyse it.

        ``from_override`` replaces the parsed From header, so a stored message
        can be checked as if it had been sent from another address or domain.
        A bare domain is accepted as well as a full address.
        Raises ParseError for unreadable input.
        """
        parsed = parse_email(raw_bytes)
        if from_override:
            if "@" not in from_override:
                from_override = f"@{from_override}"
            parsed = dataclasses.replace(parsed, from_address=from_override)
        return analyze_email(parsed, self.fetcher)

    def analyze_email(self, parsed: EmailParsed) -> AnalysisResult:
        return analyze_email(parsed, self.fetcher)

    def analyze_domain(self, domain: str) -> DomainReport:
        return analyze_domain(self.fetcher, domain)
