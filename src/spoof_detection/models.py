# src/spoof_detection/models.py

"""
Value types shared by the fetcher, the parser and the verdict calculators.

Every type here is a frozen snapshot: built once per analysis and never
mutated afterwards. ``to_dict`` methods produce the JSON shapes served by
the CLI and the HTTP API.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class DomainVerdict(str, Enum):
    """Strength of a domain's published sender policy."""

    STRONG = "Strong"
    MEDIUM = "Medium"
    WEAK = "Weak"
    INVALID = "Invalid"


class Verdict(str, Enum):
    """
    Final classification of a message.

    - AUTHENTICATED: DKIM header present and the SPF policy hard-fails.
    - POLICY_VIOLATION: DMARC says reject but the SPF policy does not hard-fail.
    - UNAUTHENTICATED: no SPF, no DMARC and no DKIM at all.
    - SUSPICIOUS: anything else, including a sender domain that does not exist.
    - INDETERMINATE: reserved for malformed data; never produced today.
    """

    AUTHENTICATED = "Authenticated"
    POLICY_VIOLATION = "PolicyViolation"
    UNAUTHENTICATED = "Unauthenticated"
    SUSPICIOUS = "Suspicious"
    INDETERMINATE = "Indeterminate"


@dataclass(frozen=True)
class SpfEvaluation:
    """
    Summary of an SPF record and everything it includes.

    Attributes:
        has_strict_all: a ``-all`` token was seen somewhere in the chain
        has_soft_all: a ``~all`` or ``?all`` token was seen
    """
    has_strict_all: bool = False
    has_soft_all: bool = False

    def merge(self, other: "SpfEvaluation") -> "SpfEvaluation":
        return SpfEvaluation(
            has_strict_all=self.has_strict_all or other.has_strict_all,
            has_soft_all=self.has_soft_all or other.has_soft_all,
        )

    @property
    def saturated(self) -> bool:
        """True once no further token can change the result."""
        return self.has_strict_all and self.has_soft_all

    def to_dict(self) -> Dict[str, bool]:
        return {"has_strict_all": self.has_strict_all, "has_soft_all": self.has_soft_all}


@dataclass(frozen=True)
class EmailParsed:
    """
    Header evidence read from a raw message.

    Attributes:
        from_address: raw ``From`` header value
        return_path: raw ``Return-Path`` header value
        auth_results: raw ``Authentication-Results`` header value
        dkim_present: a ``DKIM-Signature`` header exists (not verified)
        dkim_domain: ``d=`` tag of the first DKIM-Signature, if readable
        dkim_selector: ``s=`` tag of the first DKIM-Signature, if readable
    """
    from_address: Optional[str] = None
    return_path: Optional[str] = None
    auth_results: Optional[str] = None
    dkim_present: bool = False
    dkim_domain: Optional[str] = None
    dkim_selector: Optional[str] = None


@dataclass(frozen=True)
class Evidence:
    from_domain: Optional[str]
    spf_policy: Optional[str]
    dmarc_policy: Optional[str]
    spf_authorized: bool
    dkim_present: bool
    alignment_ok: bool
    domain_valid: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_domain": self.from_domain,
            "spf_policy": self.spf_policy,
            "dmarc_policy": self.dmarc_policy,
            "spf_authorized": self.spf_authorized,
            "dkim_present": self.dkim_present,
            "alignment_ok": self.alignment_ok,
            "domain_valid": self.domain_valid,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """A message verdict together with the evidence behind it."""
    verdict: Verdict
    evidence: Evidence

    def to_dict(self) -> Dict[str, Any]:
        return {"verdict": self.verdict.value, "evidence": self.evidence.to_dict()}


@dataclass(frozen=True)
class DomainReport:
    """Result of analysing a bare sending domain."""
    domain: str
    exists: bool
    spf: SpfEvaluation
    dmarc: Optional[str]
    dkim: bool
    verdict: DomainVerdict

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "exists": self.exists,
            "spf": self.spf.to_dict(),
            "dmarc": self.dmarc,
            "dkim": self.dkim,
            "verdict": self.verdict.value,
        }
