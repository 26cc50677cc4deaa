"""
Match scanning shared by every rule-driven parser.

Each call owns its own cursor; compiled patterns are never asked to
remember a position between calls.
"""
import logging
import re
from typing import Iterator, List, Tuple

logger = logging.getLogger(__name__)


def iter_matches(pattern: re.Pattern, text: str, pos: int = 0) -> Iterator[re.Match]:
    """
    Yield successive non-overlapping matches of *pattern* in *text*.

    Works with both ``re`` and ``regex`` compiled patterns. The scan stops
    as soon as a match fails to move the cursor forward (zero-width match),
    whatever the pattern.

    Args:
        pattern: Compiled pattern.
        text: Text to scan.
        pos: Offset to start from.

    Yields:
        Match objects with ``end() > start()``.
    """
    while pos <= len(text):
        match = pattern.search(text, pos)
        if match is None:
            return

        if match.end() <= match.start():
            logger.debug(
                "Zero-width match for %r at %d, stopping scan", pattern.pattern, match.start()
            )
            return

        yield match
        pos = match.end()


def find_all(pattern: re.Pattern, text: str) -> List[re.Match]:
    """Collect every match from iter_matches()."""
    return list(iter_matches(pattern, text))


def has_match(pattern: re.Pattern, text: str) -> bool:
    """True if *pattern* has at least one non-empty match in *text*."""
    for _ in iter_matches(pattern, text):
        return True
    return False


def spans_overlap(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    """Half-open interval intersection."""
    return a[0] < b[1] and b[0] < a[1]
