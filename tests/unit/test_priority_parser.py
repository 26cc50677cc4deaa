"""
Unit tests for the priority parser.
"""
import pytest
from pydantic import ValidationError

from taskparse.parsers.priority_parser import PriorityParser


class TestPriorityParse:
    def test_explicit_p1(self, priority_parser):
        tags = priority_parser.parse("p1 fix critical bug")
        assert len(tags) == 1
        assert tags[0].value == "high"
        assert tags[0].display_text == "High Priority"
        assert tags[0].icon_name == "AlertCircle"
        assert tags[0].color == "#ef4444"

    def test_single_tag_highest_severity_wins(self, priority_parser):
        text = "ASAP fix bug p2 maybe urgent"
        tags = priority_parser.parse(text)
        assert len(tags) == 1
        assert tags[0].value == "high"
        assert tags[0].original_text == "ASAP"
        assert tags[0].start_index == 0

    def test_medium_display(self, priority_parser):
        tags = priority_parser.parse("p2 write docs")
        assert tags[0].value == "medium"
        assert tags[0].display_text == "Medium Priority"
        assert tags[0].icon_name == "Flag"

    def test_low_display(self, priority_parser):
        tags = priority_parser.parse("clean garage someday")
        assert tags[0].value == "low"
        assert tags[0].display_text == "Low Priority"
        assert tags[0].icon_name == "Minus"
        assert tags[0].color == "#6b7280"

    def test_no_priority(self, priority_parser):
        assert priority_parser.parse("water the plants") == []
        assert not priority_parser.test("water the plants")

    def test_whole_word_only(self, priority_parser):
        assert priority_parser.parse("highlight the lowlands") == []

    def test_case_insensitive(self, priority_parser):
        tags = priority_parser.parse("URGENT: call bank")
        assert tags[0].value == "high"
        assert tags[0].original_text == "URGENT"

    def test_equal_severity_prefers_confidence(self, priority_parser):
        # "top priority" (.90 + phrase bonus) beats "important" (.85)
        tags = priority_parser.parse("important and top priority")
        assert tags[0].original_text == "top priority"

    def test_span_matches_text(self, priority_parser):
        text = "Finish report no rush"
        tag = priority_parser.parse(text)[0]
        assert text[tag.start_index:tag.end_index] == tag.original_text == "no rush"

    def test_source_is_parser_id(self, priority_parser):
        assert priority_parser.parse("p3 tidy")[0].source == "priority-parser"


class TestAdjustConfidence:
    def test_explicit_token_boost_capped(self, priority_parser):
        assert priority_parser.adjust_confidence(0.95, "p1 fix", 0, 2) == pytest.approx(0.98)

    def test_short_match_in_long_text(self, priority_parser):
        text = "p1 " + "x " * 30
        # 0.95 * 0.8 = 0.76, then +0.1 for the explicit token
        assert priority_parser.adjust_confidence(0.95, text, 0, 2) == pytest.approx(0.86)

    def test_alphanumeric_neighbour_penalty_uses_match_position(self, priority_parser):
        text = "high high"
        # second occurrence: left neighbour is a space, right is end of text
        assert priority_parser.adjust_confidence(0.75, text, 5, 9) == pytest.approx(0.75)
        assert priority_parser.adjust_confidence(0.75, "xhigh", 1, 5) == pytest.approx(0.525)

    def test_phrase_bonus(self, priority_parser):
        assert priority_parser.adjust_confidence(0.8, "no rush", 0, 7) == pytest.approx(0.85)

    def test_floor(self, priority_parser):
        assert priority_parser.adjust_confidence(0.15, "ahighb", 1, 5) == pytest.approx(0.1)


class TestCustomRules:
    def test_custom_table(self):
        parser = PriorityParser(rules=[{"pattern": r"\bblocker\b", "level": "high", "confidence": 0.9}])
        assert parser.parse("blocker in prod")[0].value == "high"
        assert parser.parse("p1 fix") == []

    def test_malformed_table_fails_at_construction(self):
        with pytest.raises(ValidationError):
            PriorityParser(rules=[{"pattern": r"\bx\b", "level": "severe", "confidence": 0.9}])
