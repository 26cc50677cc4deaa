"""
Priority Parser - rule-table severity extraction.

Every rule is scanned over the whole text; only the single strongest
signal survives, so "ASAP ... p2 ... maybe" still yields one tag.

Ranking for each match, against the best seen so far:
    1. higher severity  (low < medium < high)
    2. higher adjusted confidence
    3. earlier start
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

import regex

from taskparse.config.constants import (
    PRIORITY_COLORS,
    PRIORITY_DISPLAY,
    PRIORITY_ICONS,
    PRIORITY_RULES,
    SEVERITY_RANK,
)
from taskparse.models.rules import PriorityRule
from taskparse.models.tag import ParsedTag
from taskparse.parsers.base import Parser
from taskparse.parsers.matching import has_match, iter_matches

logger = logging.getLogger(__name__)

EXPLICIT_TOKEN = regex.compile(r"^p[123]$", regex.IGNORECASE)


@dataclass
class _Candidate:
    level: str
    confidence: float
    start: int
    end: int

    def beats(self, other: "_Candidate") -> bool:
        new_rank = SEVERITY_RANK[self.level]
        current_rank = SEVERITY_RANK[other.level]
        if new_rank != current_rank:
            return new_rank > current_rank
        if self.confidence != other.confidence:
            return self.confidence > other.confidence
        return self.start < other.start


class PriorityParser(Parser):
    """
    Detects task priority from p1/p2/p3 tokens and urgency vocabulary.

    Output is zero or one ``priority`` tag whose display text is always
    the canonical "High Priority" / "Medium Priority" / "Low Priority".
    """

    id = "priority-parser"
    name = "Priority Parser"
    priority = 8

    def __init__(self, rules: Optional[List[dict]] = None):
        table = rules if rules is not None else PRIORITY_RULES
        self.rules: List[PriorityRule] = [PriorityRule(**row) for row in table]
        self._compiled = [(rule, rule.compile()) for rule in self.rules]

    def test(self, text: str) -> bool:
        return any(has_match(pattern, text) for _, pattern in self._compiled)

    def parse(self, text: str) -> List[ParsedTag]:
        chosen: Optional[_Candidate] = None

        for rule, pattern in self._compiled:
            for match in iter_matches(pattern, text):
                candidate = _Candidate(
                    level=rule.level,
                    confidence=self.adjust_confidence(
                        rule.confidence, text, match.start(), match.end()
                    ),
                    start=match.start(),
                    end=match.end(),
                )
                if chosen is None or candidate.beats(chosen):
                    chosen = candidate

        if chosen is None:
            return []

        logger.debug(
            "Priority resolved to %s (%.2f) from %r",
            chosen.level,
            chosen.confidence,
            text[chosen.start:chosen.end],
        )

        return [
            self.make_tag(
                "priority",
                chosen.level,
                PRIORITY_DISPLAY[chosen.level],
                chosen.start,
                chosen.end,
                text,
                chosen.confidence,
                icon_name=PRIORITY_ICONS[chosen.level],
                color=PRIORITY_COLORS[chosen.level],
            )
        ]

    def adjust_confidence(self, base: float, text: str, start: int, end: int) -> float:
        """
        Adjust a rule's base confidence for the context of one match.

        - very short match in long text: x0.8
        - explicit p1/p2/p3 token: +0.1 (cap 0.98)
        - alphanumeric neighbour on either side: x0.7 per side
        - multi-word phrase: +0.05 (cap 0.95)
        """
        match_text = text[start:end]
        confidence = base

        if len(match_text) <= 2 and len(text) > 50:
            confidence *= 0.8

        if EXPLICIT_TOKEN.match(match_text.strip()):
            confidence = min(0.98, confidence + 0.1)

        if start > 0 and text[start - 1].isalnum():
            confidence *= 0.7
        if end < len(text) and text[end].isalnum():
            confidence *= 0.7

        if " " in match_text:
            confidence = min(0.95, confidence + 0.05)

        return max(0.1, min(1.0, confidence))
