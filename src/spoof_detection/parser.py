# src/spoof_detection/parser.py

from email import errors as email_errors
from email import message_from_bytes
from email import policy
from email.message import EmailMessage
import logging
from typing import Optional, Tuple

from dkim.util import InvalidTagValueList, parse_tag_value

from .errors import ParseError
from .models import EmailParsed
from .protocol_checks import to_ascii_domain

logger = logging.getLogger(__name__)


def _header(msg: EmailMessage, name: str) -> Optional[str]:
    value = msg.get(name)
    return str(value) if value is not None else None


def _dkim_tags(signature: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Return (d=, s=) from a DKIM-Signature value; the signature is not verified."""
    if not signature:
        return None, None
    try:
        tags = parse_tag_value(signature.encode("utf-8"))
    except InvalidTagValueList as e:
        logger.debug("unreadable DKIM-Signature tag list: %s", e)
        return None, None
    domain = tags.get(b"d")
    selector = tags.get(b"s")
    return (
        domain.decode("utf-8", errors="replace") if domain else None,
        selector.decode("utf-8", errors="replace") if selector else None,
    )


def extract_domain(from_address: Optional[str]) -> Optional[str]:
    """
    Domain part of an address as found in a From header, ASCII-normalized.

    Takes the text after the first ``@`` up to the next one, trims whitespace
    and trailing ``>``. If IDNA conversion fails the trimmed text is kept.
    """
    if not from_address:
        return None
    parts = from_address.split("@")
    if len(parts) < 2:
        return None
    domain = parts[1].strip().rstrip(">").strip()
    if not domain:
        return None
    return to_ascii_domain(domain) or domain


def parse_email(raw_bytes: bytes) -> EmailParsed:
    """
    Read the headers the verdict engine needs from a raw RFC 5322 message.

    Raises ParseError when the input has no readable header fields.
    Missing optional headers simply come back as None / False.
    """
    if not isinstance(raw_bytes, (bytes, bytearray)):
        raise ParseError(f"expected raw message bytes, got {type(raw_bytes).__name__}")
    if not raw_bytes.strip():
        raise ParseError("empty message")

    msg = message_from_bytes(bytes(raw_bytes), policy=policy.default)
    if not msg.keys():
        raise ParseError("no header fields found")

    try:
        dkim_signature = _header(msg, "DKIM-Signature")
        dkim_domain, dkim_selector = _dkim_tags(dkim_signature)
        return EmailParsed(
            from_address=_header(msg, "From"),
            return_path=_header(msg, "Return-Path"),
            auth_results=_header(msg, "Authentication-Results"),
            dkim_present=dkim_signature is not None,
            dkim_domain=dkim_domain,
            dkim_selector=dkim_selector,
        )
    except (email_errors.HeaderParseError, IndexError, ValueError) as e:
        raise ParseError(f"malformed header block: {e}") from e
