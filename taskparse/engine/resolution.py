"""
Conflict Resolution - one winner per overlapping span.

Ranking (best first):
    1. higher parser priority
    2. higher tag confidence
    3. earlier start
    4. earlier parser in the registration order

Tags are accepted greedily in rank order; a tag is rejected if it overlaps
an already accepted tag in scope. Each rejected tag joins the conflict of
the best-ranked accepted tag it overlaps, so every Conflict lists all of
its competitors plus the winner.

Scopes:
    global  any two overlapping tags compete
    type    only tags of the same type compete
"""
import logging
from typing import Dict, List, Tuple

from taskparse.config.constants import CONFLICT_SCOPES
from taskparse.models.tag import Conflict, ParsedTag

logger = logging.getLogger(__name__)


def _in_scope(a: ParsedTag, b: ParsedTag, scope: str) -> bool:
    if scope == "type":
        return a.type == b.type
    return True


def rank_key(tag: ParsedTag, parser_priorities: Dict[str, int], parser_order: Dict[str, int]):
    """Sort key for a tag; smaller sorts first."""
    return (
        -parser_priorities.get(tag.source, 0),
        -tag.confidence,
        tag.start_index,
        parser_order.get(tag.source, len(parser_order)),
    )


def resolve_conflicts(
    tags: List[ParsedTag],
    parser_priorities: Dict[str, int],
    scope: str = "global",
) -> Tuple[List[ParsedTag], List[Conflict]]:
    """
    Select a non-overlapping subset of *tags*.

    Args:
        tags: Candidate tags from every parser, in collection order.
        parser_priorities: {parser id: priority}. Insertion order is the
                           parser registration order (final tie-break).
        scope: "global" or "type".

    Returns:
        (kept tags sorted by start_index, conflicts sorted by start_index)

    Raises:
        ValueError: Unknown scope.
    """
    if scope not in CONFLICT_SCOPES:
        raise ValueError(f"Unknown conflict scope: {scope!r} (expected one of {CONFLICT_SCOPES})")

    parser_order = {pid: i for i, pid in enumerate(parser_priorities)}
    ranked = sorted(tags, key=lambda t: rank_key(t, parser_priorities, parser_order))

    accepted: List[ParsedTag] = []
    losers: Dict[int, List[ParsedTag]] = {}

    for tag in ranked:
        blocking = [
            i for i, kept in enumerate(accepted)
            if _in_scope(tag, kept, scope) and tag.overlaps(kept)
        ]
        if not blocking:
            accepted.append(tag)
            continue

        # accepted is in rank order, so the first blocker is the best one
        winner_idx = blocking[0]
        losers.setdefault(winner_idx, []).append(tag)
        logger.debug("Tag %r lost to %r", tag, accepted[winner_idx])

    conflicts: List[Conflict] = []
    for winner_idx, lost in losers.items():
        winner = accepted[winner_idx]
        competing = [winner] + lost
        conflicts.append(
            Conflict(
                start_index=min(t.start_index for t in competing),
                end_index=max(t.end_index for t in competing),
                tags=sorted(competing, key=lambda t: (t.start_index, t.end_index)),
                resolved=winner,
            )
        )

    kept = sorted(accepted, key=lambda t: (t.start_index, t.end_index))
    conflicts.sort(key=lambda c: (c.start_index, c.end_index))
    return kept, conflicts
