# src/spoof_detection/config.py

"""
Runtime configuration read from environment variables (SPOOF_*, HOST, PORT).
Unset or unparsable values fall back to the defaults below.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# DNS query timeouts (seconds)
DNS_TIMEOUT = 5.0
DNS_LIFETIME = 10.0

# Selectors probed at <selector>._domainkey.<domain>, in order
DEFAULT_DKIM_SELECTORS = ("default", "google", "selector1", "selector2")

# include: chains deeper than this are treated as "no signal"
MAX_SPF_DEPTH = 10

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080


@dataclass(frozen=True)
class Settings:
    dns_timeout: float = DNS_TIMEOUT
    dns_lifetime: float = DNS_LIFETIME
    nameservers: Tuple[str, ...] = ()
    dkim_selectors: Tuple[str, ...] = DEFAULT_DKIM_SELECTORS
    log_level: str = "INFO"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def _env_float(name: str, default: float) -> float:
    v = os.environ.get(name, "").strip()
    if not v:
        return default
    try:
        value = float(v)
    except ValueError:
        logger.warning("%s has invalid value %r; using %s", name, v, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, got %r; using %s", name, v, default)
        return default
    return value


def _env_int(name: str, default: int) -> int:
    v = os.environ.get(name, "").strip()
    if not v:
        return default
    try:
        return int(v)
    except ValueError:
        logger.warning("%s has invalid value %r; using %s", name, v, default)
        return default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    v = os.environ.get(name, "")
    items = tuple(p.strip() for p in v.split(",") if p.strip())
    return items or default


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings(
        dns_timeout=_env_float("SPOOF_DNS_TIMEOUT", DNS_TIMEOUT),
        dns_lifetime=_env_float("SPOOF_DNS_LIFETIME", DNS_LIFETIME),
        nameservers=_env_list("SPOOF_NAMESERVERS", ()),
        dkim_selectors=_env_list("SPOOF_DKIM_SELECTORS", DEFAULT_DKIM_SELECTORS),
        log_level=os.environ.get("SPOOF_LOG_LEVEL", "").strip().upper() or "INFO",
        host=os.environ.get("HOST", "").strip() or DEFAULT_HOST,
        port=_env_int("PORT", DEFAULT_PORT),
    )


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Route all loggers to stderr (and optionally a file)."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    log_format = "%(asctime)s %(name)s %(levelname)s %(message)s"
    handlers = [logging.StreamHandler()]
    if log_file:
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            handlers.append(fh)
        except OSError as e:
            logger.warning("Could not open log file %s: %s", log_file, e)
    logging.basicConfig(level=log_level, format=log_format, handlers=handlers, force=True)
