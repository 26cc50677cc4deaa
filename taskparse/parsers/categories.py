"""
Category scoring - semantic labels from keyword tables.

Score per category:
    distinct keyword matches + 0.2 if any single match is longer than 5 chars

Within an exclusive group only the top scorer survives (declaration order
breaks ties); every other category with score >= 1 is emitted on its own.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from taskparse.config.constants import CATEGORY_RULES, EXCLUSIVE_CATEGORY_GROUPS
from taskparse.models.rules import CategoryTable
from taskparse.parsers.matching import find_all, has_match

logger = logging.getLogger(__name__)

LONG_MATCH_BONUS: float = 0.2
LONG_MATCH_CHARS: int = 5
MIN_EMIT_SCORE: float = 1.0


@dataclass
class CategoryScore:
    """Evidence collected for one category."""

    category: str
    score: float
    start: int
    end: int
    order: int

    @property
    def confidence(self) -> float:
        return min(0.9, 0.5 + 0.1 * self.score)


class CategoryScorer:
    """Compiles the category table once and scores texts against it."""

    def __init__(
        self,
        rules: Optional[List[dict]] = None,
        exclusive_groups: Optional[List[tuple]] = None,
    ):
        self.table = CategoryTable(
            categories=rules if rules is not None else CATEGORY_RULES,
            exclusive_groups=(
                exclusive_groups if exclusive_groups is not None else EXCLUSIVE_CATEGORY_GROUPS
            ),
        )
        self._compiled = [(rule.name, rule.compile()) for rule in self.table.categories]

    def has_keywords(self, text: str) -> bool:
        return any(has_match(pattern, text) for _, pattern in self._compiled)

    def score(self, text: str) -> List[CategoryScore]:
        """Score every category that has at least one keyword in *text*."""
        scores: List[CategoryScore] = []

        for order, (category, pattern) in enumerate(self._compiled):
            matches = find_all(pattern, text)
            if not matches:
                continue

            distinct = {m.group(0).lower() for m in matches}
            score = float(len(distinct))
            if any(len(m.group(0)) > LONG_MATCH_CHARS for m in matches):
                score += LONG_MATCH_BONUS

            first = matches[0]
            scores.append(
                CategoryScore(
                    category=category,
                    score=score,
                    start=first.start(),
                    end=first.end(),
                    order=order,
                )
            )

        return scores

    def select(self, scores: List[CategoryScore]) -> List[CategoryScore]:
        """Apply exclusive groups, then the emit threshold."""
        by_name: Dict[str, CategoryScore] = {s.category: s for s in scores}
        grouped = {name for group in self.table.exclusive_groups for name in group}
        selected: List[CategoryScore] = []

        for group in self.table.exclusive_groups:
            in_group = [by_name[name] for name in group if name in by_name]
            if not in_group:
                continue
            best = sorted(in_group, key=lambda s: (-s.score, s.order))[0]
            if len(in_group) > 1:
                logger.debug(
                    "Exclusive group %s resolved to %s (%.1f)", group, best.category, best.score
                )
            selected.append(best)

        for s in scores:
            if s.category not in grouped and s.score >= MIN_EMIT_SCORE:
                selected.append(s)

        selected.sort(key=lambda s: s.order)
        return selected
