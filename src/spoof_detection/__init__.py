"""
Email spoofing detection from SPF, DKIM-presence and DMARC evidence.
"""

from .detector import Detector, analyze_email, decide_verdict
from .domain_verdict import analyze_domain, calculate_domain_verdict, resolve_dkim
from .errors import ParseError, ResolverInitError, SpoofDetectionError
from .models import (
    AnalysisResult,
    DomainReport,
    DomainVerdict,
    EmailParsed,
    Evidence,
    SpfEvaluation,
    Verdict,
)
from .parser import extract_domain, parse_email
from .protocol_checks import DnsRecordFetcher, RecordFetcher
from .spf import evaluate_spf

__all__ = [
    "AnalysisResult",
    "Detector",
    "DnsRecordFetcher",
    "DomainReport",
    "DomainVerdict",
    "EmailParsed",
    "Evidence",
    "ParseError",
    "RecordFetcher",
    "ResolverInitError",
    "SpfEvaluation",
    "SpoofDetectionError",
    "Verdict",
    "analyze_domain",
    "analyze_email",
    "calculate_domain_verdict",
    "decide_verdict",
    "evaluate_spf",
    "extract_domain",
    "parse_email",
    "resolve_dkim",
]
