"""
Unit tests for taskparse.engine.metrics.
"""
from typing import List

from prometheus_client import REGISTRY

from taskparse.engine.metrics import (
    record_conflicts,
    record_parser_failure,
    record_tags,
    timed_parser,
)
from taskparse.engine.smart_parser import SmartParser
from taskparse.models.tag import ParsedTag
from taskparse.parsers.base import Parser


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricHelpers:
    def test_record_parser_failure(self):
        labels = {"parser_id": "metrics-test-parser", "stage": "parse"}
        before = _sample("taskparse_parser_failures_total", labels)
        record_parser_failure("metrics-test-parser")
        assert _sample("taskparse_parser_failures_total", labels) == before + 1

    def test_record_tags_by_type(self):
        before = _sample("taskparse_tags_emitted_total", {"tag_type": "project"})
        tag = ParsedTag("project", "Acme", "Acme", 0, 4, "Acme", 0.7, "entity-parser")
        record_tags([tag, tag])
        assert _sample("taskparse_tags_emitted_total", {"tag_type": "project"}) == before + 2

    def test_record_conflicts_ignores_zero(self):
        before = _sample("taskparse_conflicts_resolved_total")
        record_conflicts(0)
        record_conflicts(2)
        assert _sample("taskparse_conflicts_resolved_total") == before + 2

    def test_timed_parser_observes(self):
        labels = {"parser_id": "metrics-timed-parser"}
        before = _sample("taskparse_parser_seconds_count", labels)
        with timed_parser("metrics-timed-parser"):
            pass
        assert _sample("taskparse_parser_seconds_count", labels) == before + 1


class FailingParser(Parser):
    id = "metrics-failing-parser"
    name = "Failing Parser"
    priority = 1

    def test(self, text: str) -> bool:
        return True

    def parse(self, text: str) -> List[ParsedTag]:
        raise RuntimeError("boom")


class TestOrchestratorMetrics:
    def test_failure_counted_by_orchestrator(self):
        labels = {"parser_id": "metrics-failing-parser", "stage": "parse"}
        before = _sample("taskparse_parser_failures_total", labels)
        SmartParser([FailingParser()]).parse("anything")
        assert _sample("taskparse_parser_failures_total", labels) == before + 1
