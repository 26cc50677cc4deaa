"""
Parser contract shared by every extraction strategy.

The orchestrator only knows this interface; adding a strategy means
writing a subclass and adding it to the parser list.
"""
import uuid
from abc import ABC, abstractmethod
from typing import List

from taskparse.models.tag import ParsedTag, TagValue


class Parser(ABC):
    """
    Base class for extraction strategies.

    Attributes:
        id: Stable identifier, copied into ParsedTag.source.
        name: Human-readable name for diagnostics.
        priority: Tie-break weight during conflict resolution (higher wins).
    """

    id: str = ""
    name: str = ""
    priority: int = 0

    @abstractmethod
    def test(self, text: str) -> bool:
        """
        Cheap admission check.

        Must never return False for text that parse() would tag.
        """

    @abstractmethod
    def parse(self, text: str) -> List[ParsedTag]:
        """Extract every tag this strategy recognizes in *text*."""

    def make_tag(
        self,
        tag_type: str,
        value: TagValue,
        display_text: str,
        start: int,
        end: int,
        text: str,
        confidence: float,
        icon_name: str,
        color: str,
    ) -> ParsedTag:
        """Build a tag for text[start:end] attributed to this parser."""
        return ParsedTag(
            id=str(uuid.uuid4()),
            type=tag_type,
            value=value,
            display_text=display_text,
            start_index=start,
            end_index=end,
            original_text=text[start:end],
            confidence=round(confidence, 4),
            source=self.id,
            icon_name=icon_name,
            color=color,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, priority={self.priority})"
