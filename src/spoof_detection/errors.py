# src/spoof_detection/errors.py


class SpoofDetectionError(Exception):
    """Base class for errors raised at the edges of the detector."""


class ParseError(SpoofDetectionError):
    """Raw message bytes could not be read as a header block."""


class ResolverInitError(SpoofDetectionError):
    """The DNS client could not be constructed (e.g. no resolv.conf)."""
