"""
Tag and result models shared by every parser and the orchestrator.

All instances are created inside a single parse call and handed to the
caller; nothing here is cached across calls.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union

from taskparse.config.constants import TAG_TYPES

TagValue = Union[str, date, datetime]


class TagSpanError(ValueError):
    """A parser produced a span that does not fit the parsed text."""


@dataclass
class ParsedTag:
    """A single typed, spanned annotation with provenance."""

    type: str
    value: TagValue
    display_text: str
    start_index: int
    end_index: int
    original_text: str
    confidence: float
    source: str
    icon_name: str = "Tag"
    color: str = "#6b7280"
    id: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if self.type not in TAG_TYPES:
            raise ValueError(f"Unknown tag type: {self.type!r}")
        if self.start_index < 0 or self.start_index >= self.end_index:
            raise TagSpanError(
                f"Invalid span [{self.start_index},{self.end_index}) for {self.original_text!r}"
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence out of range: {self.confidence}")

    def overlaps(self, other: "ParsedTag") -> bool:
        """Check if two tags have overlapping spans."""
        return self.start_index < other.end_index and other.start_index < self.end_index

    def span_length(self) -> int:
        return self.end_index - self.start_index

    def value_str(self) -> str:
        if isinstance(self.value, (date, datetime)):
            return self.value.isoformat()
        return str(self.value)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "value": self.value_str(),
            "displayText": self.display_text,
            "iconName": self.icon_name,
            "color": self.color,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
            "originalText": self.original_text,
            "confidence": self.confidence,
            "source": self.source,
        }

    def __repr__(self) -> str:
        return (
            f"ParsedTag({self.type}, {self.value_str()!r}, "
            f"[{self.start_index},{self.end_index}], {self.source}, {self.confidence:.2f})"
        )


@dataclass
class Conflict:
    """Tags whose spans overlap, plus the single tag kept for them."""

    start_index: int
    end_index: int
    tags: List[ParsedTag] = field(default_factory=list)
    resolved: Optional[ParsedTag] = None

    def to_dict(self) -> dict:
        return {
            "startIndex": self.start_index,
            "endIndex": self.end_index,
            "tags": [t.to_dict() for t in self.tags],
            "resolved": self.resolved.to_dict() if self.resolved else None,
        }


@dataclass
class ParseResult:
    """Outcome of parsing one task title."""

    clean_text: str
    tags: List[ParsedTag] = field(default_factory=list)
    confidence: float = 0.0
    conflicts: List[Conflict] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0

    def tags_of_type(self, tag_type: str) -> List[ParsedTag]:
        return [t for t in self.tags if t.type == tag_type]

    @classmethod
    def empty(cls, clean_text: str = "") -> "ParseResult":
        return cls(clean_text=clean_text, tags=[], confidence=0.0, conflicts=[])
