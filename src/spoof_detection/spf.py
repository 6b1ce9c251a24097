# src/spoof_detection/spf.py

"""
SPF record evaluation: walks ``include:`` chains and reports whether a hard
fail (``-all``) or soft/neutral fail (``~all``, ``?all``) appears anywhere.

Only the ``all`` qualifiers and ``include:`` are interpreted; ``a``, ``mx``,
``ip4``, ``ip6``, ``redirect`` and modifiers are ignored. Missing records at
any level contribute nothing.
"""

from collections import deque
import logging

from .config import MAX_SPF_DEPTH
from .models import SpfEvaluation
from .protocol_checks import RecordFetcher, ask

logger = logging.getLogger(__name__)

STRICT_ALL = "-all"
SOFT_ALL = ("~all", "?all")
INCLUDE_PREFIX = "include:"


def evaluate_spf(fetcher: RecordFetcher, domain: str, depth: int = 0) -> SpfEvaluation:
    """
    Summarise the SPF policy of ``domain`` and every domain it includes.

    Records at depth MAX_SPF_DEPTH or below are not fetched, so a chain of
    ten or more ``include:`` hops contributes nothing past the limit. The
    walk is breadth-first, so each domain is expanded once, at the shallowest
    depth it is reachable from; revisiting it deeper could not add a flag.
    """
    result = SpfEvaluation()
    queue = deque([(domain, depth)])
    expanded = set()

    while queue:
        current, level = queue.popleft()
        if level >= MAX_SPF_DEPTH:
            logger.debug("SPF depth limit reached at %s", current)
            continue
        if current in expanded:
            continue
        expanded.add(current)

        record = ask(fetcher.resolve_spf, current, None)
        if record is None:
            continue
        logger.debug("SPF %s (depth %d): %s", current, level, record)

        for token in record.split():
            if token == STRICT_ALL:
                result = result.merge(SpfEvaluation(has_strict_all=True))
            elif token in SOFT_ALL:
                result = result.merge(SpfEvaluation(has_soft_all=True))
            elif token.startswith(INCLUDE_PREFIX):
                child = token[len(INCLUDE_PREFIX):]
                if child:
                    queue.append((child, level + 1))

            if result.saturated:
                return result

    return result
