"""
Prometheus Metrics - parser observability.

Exposes counters and histograms for:
- Parser failures (per parser and stage)
- Emitted tags per tag type
- Conflicts resolved by the orchestrator
- Per-parser latency

Usage
-----
    from taskparse.engine.metrics import record_tags, timed_parser

    with timed_parser("date-time-parser"):
        tags = parser.parse(text)

    record_tags(tags)
"""
import logging
from contextlib import contextmanager
from typing import Generator, Iterable

from prometheus_client import Counter, Histogram

from taskparse.models.tag import ParsedTag

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# Parser exceptions swallowed by the orchestrator.
PARSER_FAILURES: Counter = Counter(
    "taskparse_parser_failures_total",
    "Parser exceptions caught by the orchestrator, by parser and stage (test / parse)",
    ["parser_id", "stage"],
)

# Tags that survived conflict resolution.
TAGS_EMITTED: Counter = Counter(
    "taskparse_tags_emitted_total",
    "Tags returned to callers, by tag type",
    ["tag_type"],
)

# Conflicts recorded on parse results.
CONFLICTS_RESOLVED: Counter = Counter(
    "taskparse_conflicts_resolved_total",
    "Overlapping tag groups resolved to a single winner",
)

# Time spent inside each parser's parse() (seconds).
PARSE_LATENCY: Histogram = Histogram(
    "taskparse_parser_seconds",
    "Processing time per parser in seconds",
    ["parser_id"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def record_parser_failure(parser_id: str, stage: str = "parse") -> None:
    """Increment the failure counter for *parser_id*."""
    PARSER_FAILURES.labels(parser_id=parser_id, stage=stage).inc()


def record_tags(tags: Iterable[ParsedTag]) -> None:
    """Count each tag under its type."""
    for tag in tags:
        TAGS_EMITTED.labels(tag_type=tag.type).inc()


def record_conflicts(count: int) -> None:
    if count > 0:
        CONFLICTS_RESOLVED.inc(count)


@contextmanager
def timed_parser(parser_id: str) -> Generator[None, None, None]:
    """
    Context manager that records parser latency.

    Usage::

        with timed_parser("priority-parser"):
            tags = parser.parse(text)
    """
    with PARSE_LATENCY.labels(parser_id=parser_id).time():
        yield
