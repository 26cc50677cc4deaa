"""
Unit tests for tag/result models and rule-table models.
"""
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from taskparse.models.rules import CategoryRule, CategoryTable, PriorityRule
from taskparse.models.tag import Conflict, ParsedTag, ParseResult, TagSpanError


def _tag(start=0, end=4, tag_type="person", value="John", confidence=0.8, **kwargs):
    return ParsedTag(
        type=tag_type,
        value=value,
        display_text=str(value),
        start_index=start,
        end_index=end,
        original_text="x" * (end - start),
        confidence=confidence,
        source="entity-parser",
        **kwargs,
    )


class TestParsedTag:
    def test_overlap(self):
        assert _tag(0, 5).overlaps(_tag(3, 8))

    def test_adjacent_no_overlap(self):
        assert not _tag(0, 5).overlaps(_tag(5, 8))

    def test_contained(self):
        assert _tag(0, 10).overlaps(_tag(2, 4))

    def test_span_length(self):
        assert _tag(3, 9).span_length() == 6

    def test_empty_span_rejected(self):
        with pytest.raises(TagSpanError):
            _tag(4, 4)

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError):
            _tag(-1, 3)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError, match="Unknown tag type"):
            _tag(tag_type="emoji")

    def test_confidence_out_of_range(self):
        with pytest.raises(ValueError, match="Confidence"):
            _tag(confidence=1.2)

    def test_id_excluded_from_equality(self):
        assert _tag(id="a") == _tag(id="b")

    def test_to_dict_camel_case_and_iso_values(self):
        d = _tag(0, 8, tag_type="date", value=date(2026, 10, 20)).to_dict()
        assert d["value"] == "2026-10-20"
        assert d["startIndex"] == 0
        assert d["endIndex"] == 8
        assert "displayText" in d and "iconName" in d and "originalText" in d

    def test_datetime_value_str(self):
        tag = _tag(0, 3, tag_type="time", value=datetime(2026, 10, 20, 17, 0))
        assert tag.value_str() == "2026-10-20T17:00:00"


class TestParseResult:
    def test_empty(self):
        result = ParseResult.empty()
        assert result.clean_text == ""
        assert result.tags == []
        assert result.confidence == 0.0
        assert not result.has_conflicts

    def test_has_conflicts(self):
        winner, loser = _tag(0, 4), _tag(2, 6, confidence=0.6)
        result = ParseResult(
            clean_text="",
            tags=[winner],
            conflicts=[Conflict(0, 6, [winner, loser], winner)],
        )
        assert result.has_conflicts

    def test_tags_of_type(self):
        result = ParseResult(
            clean_text="",
            tags=[_tag(0, 4), _tag(5, 9, tag_type="label", value="work")],
        )
        assert [t.value for t in result.tags_of_type("label")] == ["work"]

    def test_conflict_to_dict(self):
        winner = _tag(0, 4)
        d = Conflict(0, 6, [winner, _tag(2, 6)], winner).to_dict()
        assert d["resolved"]["value"] == "John"
        assert len(d["tags"]) == 2


class TestPriorityRule:
    def test_valid_rule(self):
        rule = PriorityRule(pattern=r"\bp1\b", level="high", confidence=0.95)
        assert rule.compile().search("P1 fix bug")

    def test_bad_level(self):
        with pytest.raises(ValidationError):
            PriorityRule(pattern=r"\bx\b", level="extreme", confidence=0.5)

    def test_bad_confidence(self):
        with pytest.raises(ValidationError):
            PriorityRule(pattern=r"\bx\b", level="low", confidence=1.5)

    def test_pattern_must_compile(self):
        with pytest.raises(ValidationError):
            PriorityRule(pattern=r"(unclosed", level="low", confidence=0.5)

    def test_empty_matching_pattern_rejected(self):
        with pytest.raises(ValidationError):
            PriorityRule(pattern=r"x*", level="low", confidence=0.5)


class TestCategoryModels:
    def test_keywords_normalized(self):
        rule = CategoryRule(name="work", keywords=[" Meeting ", "SPRINT"])
        assert rule.keywords == ["meeting", "sprint"]

    def test_duplicate_keywords_rejected(self):
        with pytest.raises(ValidationError):
            CategoryRule(name="work", keywords=["meeting", "Meeting"])

    def test_phrase_wins_over_prefix(self):
        pattern = CategoryRule(name="social", keywords=["game", "game night"]).compile()
        assert pattern.search("host game night").group(0) == "game night"

    def test_unknown_group_member_rejected(self):
        with pytest.raises(ValidationError):
            CategoryTable(
                categories=[{"name": "work", "keywords": ["meeting"]}],
                exclusive_groups=[("work", "school")],
            )

    def test_single_member_group_rejected(self):
        with pytest.raises(ValidationError):
            CategoryTable(
                categories=[{"name": "work", "keywords": ["meeting"]}],
                exclusive_groups=[("work",)],
            )

    def test_category_in_two_groups_rejected(self):
        with pytest.raises(ValidationError):
            CategoryTable(
                categories=[
                    {"name": "a", "keywords": ["x"]},
                    {"name": "b", "keywords": ["y"]},
                    {"name": "c", "keywords": ["z"]},
                ],
                exclusive_groups=[("a", "b"), ("b", "c")],
            )
