"""
Smart Parser - main entry point for task-title parsing.

Executes the parse pipeline:
    1. Input guard (blank / too short)
    2. Parser fan-out (test, then parse; failures are isolated)
    3. Span validation against the input text
    4. Conflict resolution
    5. Clean text
    6. Aggregate confidence
"""
import asyncio
import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

import regex

from taskparse.config import settings
from taskparse.config.constants import CONFLICT_SCOPES
from taskparse.engine.confidence import aggregate_confidence
from taskparse.engine.metrics import (
    record_conflicts,
    record_parser_failure,
    record_tags,
    timed_parser,
)
from taskparse.engine.resolution import resolve_conflicts
from taskparse.models.tag import ParsedTag, ParseResult, TagSpanError
from taskparse.parsers.base import Parser
from taskparse.parsers.date_parser import DateTimeParser
from taskparse.parsers.entity_parser import EntityParser
from taskparse.parsers.priority_parser import PriorityParser

logger = logging.getLogger(__name__)

WHITESPACE_RUN = regex.compile(r"\s+")


def _preview(text: str) -> str:
    limit = settings.MAX_TEXT_LOG_CHARS
    return text if len(text) <= limit else text[:limit] + "..."


def build_clean_text(text: str, tags: List[ParsedTag]) -> str:
    """
    Remove every tag span from *text*.

    Spans are cut from the highest start down so earlier offsets stay
    valid; whitespace runs left behind collapse to one space.
    """
    clean = text
    for tag in sorted(tags, key=lambda t: t.start_index, reverse=True):
        clean = clean[:tag.start_index] + clean[tag.end_index:]
    return WHITESPACE_RUN.sub(" ", clean).strip()


def validate_spans(text: str, tags: List[ParsedTag]) -> None:
    """
    Check every tag span against *text*.

    Raises:
        TagSpanError: Span out of bounds or original_text not the slice.
    """
    for tag in tags:
        if tag.start_index < 0 or tag.end_index > len(text) or tag.start_index >= tag.end_index:
            raise TagSpanError(
                f"{tag.source} produced span [{tag.start_index},{tag.end_index}) "
                f"outside text of length {len(text)}"
            )
        if text[tag.start_index:tag.end_index] != tag.original_text:
            raise TagSpanError(
                f"{tag.source} produced original_text {tag.original_text!r} "
                f"that differs from text[{tag.start_index}:{tag.end_index}]"
            )


class SmartParser:
    """
    Runs an ordered list of parsers over one text and merges their tags.

    Args:
        parsers: Parsers in registration order (last conflict tie-break).
        conflict_scope: "global" or "type". Defaults to settings.CONFLICT_SCOPE.
        min_length: Shorter stripped inputs produce no tags.
                    Defaults to settings.PARSE_MIN_LENGTH.
    """

    def __init__(
        self,
        parsers: List[Parser],
        conflict_scope: Optional[str] = None,
        min_length: Optional[int] = None,
    ):
        self.parsers = list(parsers)
        self.conflict_scope = conflict_scope or settings.CONFLICT_SCOPE
        if self.conflict_scope not in CONFLICT_SCOPES:
            raise ValueError(
                f"Unknown conflict scope: {self.conflict_scope!r} (expected one of {CONFLICT_SCOPES})"
            )
        self.min_length = settings.PARSE_MIN_LENGTH if min_length is None else min_length
        self.parser_priorities: Dict[str, int] = {p.id: p.priority for p in self.parsers}

    def parse(self, text: str) -> ParseResult:
        """
        Parse one task title.

        Args:
            text: Raw user input.

        Returns:
            ParseResult with non-overlapping tags sorted by start index.

        Raises:
            TagSpanError: A parser returned a span that does not fit *text*.
        """
        if text is None or not text.strip():
            return ParseResult.empty()
        if len(text.strip()) < self.min_length:
            return ParseResult.empty(clean_text=text.strip())

        start_time = time.monotonic()
        collected: List[ParsedTag] = []

        for parser in self.parsers:
            collected.extend(self._run_parser(parser, text))

        validate_spans(text, collected)

        tags, conflicts = resolve_conflicts(
            collected, self.parser_priorities, self.conflict_scope
        )

        result = ParseResult(
            clean_text=build_clean_text(text, tags),
            tags=tags,
            confidence=aggregate_confidence(tags),
            conflicts=conflicts,
        )

        record_tags(tags)
        record_conflicts(len(conflicts))

        logger.debug(
            "Parsed %r: %d tags, %d conflicts in %.1f ms",
            _preview(text),
            len(tags),
            len(conflicts),
            (time.monotonic() - start_time) * 1000,
        )
        return result

    async def parse_async(self, text: str) -> ParseResult:
        """Awaitable form of parse(); same result for the same text."""
        await asyncio.sleep(0)
        return self.parse(text)

    def _run_parser(self, parser: Parser, text: str) -> List[ParsedTag]:
        try:
            admitted = parser.test(text)
        except Exception as e:
            logger.warning("Parser %s failed in test(): %s", parser.id, e)
            record_parser_failure(parser.id, "test")
            return []

        if not admitted:
            return []

        try:
            with timed_parser(parser.id):
                return list(parser.parse(text))
        except TagSpanError:
            raise
        except Exception as e:
            logger.warning(
                "Parser %s failed in parse() for %r: %s", parser.id, _preview(text), e
            )
            record_parser_failure(parser.id, "parse")
            return []

    def test_parse(self, text: str) -> Dict[str, dict]:
        """
        Diagnostic view: what each parser says about *text*, before
        conflict resolution.

        Returns:
            {parser id: {"name", "priority", "admitted", "tags", "error"}}
        """
        report: Dict[str, dict] = {}

        for parser in self.parsers:
            entry = {
                "name": parser.name,
                "priority": parser.priority,
                "admitted": False,
                "tags": [],
                "error": None,
            }
            try:
                entry["admitted"] = bool(parser.test(text))
                if entry["admitted"]:
                    entry["tags"] = [t.to_dict() for t in parser.parse(text)]
            except Exception as e:
                logger.warning("Parser %s failed during diagnostics: %s", parser.id, e)
                entry["error"] = f"{type(e).__name__}: {e}"
            report[parser.id] = entry

        return report


def build_default_parser(
    clock: Optional[Callable[[], datetime]] = None,
    nlp_model=None,
    ner_enabled: Optional[bool] = None,
    conflict_scope: Optional[str] = None,
) -> SmartParser:
    """
    Assemble the standard parser list: date/time, priority, entities.

    Args:
        clock: Reference "now" provider for relative dates.
        nlp_model: Pre-loaded spaCy model for NER.
        ner_enabled: Override settings.NER_ENABLED.
        conflict_scope: Override settings.CONFLICT_SCOPE.
    """
    parsers: List[Parser] = [
        DateTimeParser(clock=clock),
        PriorityParser(),
        EntityParser(nlp_model=nlp_model, ner_enabled=ner_enabled),
    ]
    return SmartParser(parsers, conflict_scope=conflict_scope)
