"""
Entity Parser - people, locations, organizations and category labels.

Passes (each appends to one candidate list):
    1. spaCy NER        PERSON / GPE,LOC,FAC / ORG
    2. People fallbacks kinship terms, names after trigger verbs,
                        capitalized token runs
    3. Addresses        numbered streets, "street, city, ST ZIP"
    4. Locations        preposition + capitalized phrase, venue keywords,
                        street names, lowercase "at/near ..." phrases
    5. Labels           keyword-scored categories with exclusive groups

A pass never re-tags a span an earlier pass already claimed for the same
entity type. Conflicts across types are left to the orchestrator.
"""
import logging
from typing import List, Optional

import regex

from taskparse.config import settings
from taskparse.config.constants import (
    ADDRESS_CONFIDENCE,
    ADDRESS_SUFFIXES,
    CAPITALIZED_NAME_CONFIDENCE,
    CATEGORY_COLORS,
    CATEGORY_ICONS,
    CONTEXT_NAME_STOPWORDS,
    DEFAULT_LABEL_COLOR,
    DEFAULT_LABEL_ICON,
    FALLBACK_LOCATION_CONFIDENCE,
    FALLBACK_LOCATION_MAX_WORDS,
    KINSHIP_TERMS,
    LOCATION_COLOR,
    LOCATION_ICON,
    LOCATION_PHRASE_STOPWORDS,
    LOCATION_PREPOSITIONS,
    NAME_STOPLIST,
    NAME_TAIL_STOPWORDS,
    NAME_TRIGGERS,
    NER_ORG_LABELS,
    NER_PERSON_LABELS,
    NER_PLACE_LABELS,
    NER_PLACE_CONFIDENCE,
    ORGANIZATION_CONFIDENCE,
    PATTERN_LOCATION_CONFIDENCE,
    PERSON_COLOR,
    PERSON_CONFIDENCE,
    PERSON_ICON,
    PROJECT_COLOR,
    PROJECT_ICON,
    STREET_SUFFIXES,
    VENUE_KEYWORDS,
)
from taskparse.models.tag import ParsedTag
from taskparse.parsers.base import Parser
from taskparse.parsers.categories import CategoryScorer
from taskparse.parsers.lexicon import find_lexicon_terms
from taskparse.parsers.matching import has_match, iter_matches, spans_overlap
from taskparse.parsers.ner_extractor import extract_ner_spans, filter_spans, resolve_model

logger = logging.getLogger(__name__)

# Letters and combining marks in any script
_L = r"\p{L}\p{M}"


def _alternation(words: List[str]) -> str:
    return "|".join(regex.escape(w).replace(r"\ ", r"\s+") for w in sorted(words, key=len, reverse=True))


# =============================================================================
# Patterns
# =============================================================================
NAME_CONTEXT_PATTERN = regex.compile(
    rf"\b(?i:{_alternation(NAME_TRIGGERS)})\s+"
    rf"(?P<name>[{_L}][\w{_L}'’.-]*(?:\s+\p{{Lu}}[{_L}'’.-]*(?![\w{_L}]))*)"
)

CAPITALIZED_NAME_PATTERN = regex.compile(
    rf"\b(\p{{Lu}}[{_L}.'’-]+(?:\s+\p{{Lu}}[{_L}.'’-]+)*)\b"
)

PREPOSITION_PLACE_PATTERN = regex.compile(
    rf"\b(?i:{_alternation(LOCATION_PREPOSITIONS)})\s+"
    rf"(?P<place>\p{{Lu}}[{_L}]+(?:\s+\p{{Lu}}[{_L}]+)*)"
)

VENUE_PATTERN = regex.compile(rf"\b(?P<place>{_alternation(VENUE_KEYWORDS)})\b", regex.IGNORECASE)

STREET_NAME_PATTERN = regex.compile(
    rf"\b(?P<place>\p{{Lu}}[{_L}]+\s+(?:{_alternation(STREET_SUFFIXES)}))\b"
)

FALLBACK_PLACE_PATTERN = regex.compile(
    rf"\b(?:at|near)\s+(?P<place>(?:the\s+)?[{_L}]+(?:\s+[{_L}]+){{0,{FALLBACK_LOCATION_MAX_WORDS - 1}}})",
    regex.IGNORECASE,
)

_SUFFIX = _alternation(ADDRESS_SUFFIXES)

ADDRESS_PATTERNS = [
    # 1 Infinite Loop, Cupertino, CA 95014
    regex.compile(
        rf"\b\d+\s+[{_L}]+(?:\s+[{_L}]+)*,\s*[{_L}]+(?:\s+[{_L}]+)*,\s*[A-Z]{{2}}\s*\d{{5}}(?:-\d{{4}})?\b"
    ),
    # 123 Main St, 500 5th Ave, 42 Wallaby Way Apt 3
    regex.compile(
        rf"\b\d+\s+(?:[{_L}\d]+(?:\s+\d+)?(?:\s+[{_L}]+)*?)\s+(?:{_SUFFIX})\b"
        rf"(?:\s*(?:#|Apt|Unit)\s*[\w-]+)?"
    ),
    # Simpler numeric street, any casing
    regex.compile(
        rf"\b\d{{1,6}}\s+[{_L}.'-]+\s+(?:{_SUFFIX})\b",
        regex.IGNORECASE,
    ),
]

POSSESSIVE = regex.compile(r"['’]s$", regex.IGNORECASE)
TRAILING_PUNCT = regex.compile(r"[.,!?'’]+$")
WHITESPACE_RUN = regex.compile(r"\s+")
WORD = regex.compile(r"\S+")


def normalize_person_name(raw: str) -> str:
    """
    Canonical person name: no possessive, no trailing punctuation,
    single spaces, first letter of each word upper-cased.
    """
    name = TRAILING_PUNCT.sub("", raw.strip())
    name = POSSESSIVE.sub("", name)
    name = TRAILING_PUNCT.sub("", name)
    name = WHITESPACE_RUN.sub(" ", name).strip()
    if not name:
        return ""
    return " ".join(w[:1].upper() + w[1:] for w in name.split(" "))


class EntityParser(Parser):
    """
    Named-entity and semantic-label extraction.

    Args:
        nlp_model: Pre-loaded spaCy-compatible model. If None and NER is
                   enabled, *model_name* is lazy-loaded.
        model_name: spaCy model to load (defaults to settings.SPACY_MODEL).
        ner_enabled: Skip NER entirely when False.
        category_scorer: Pre-built CategoryScorer (custom tables).
    """

    id = "entity-parser"
    name = "NLP Entity Parser"
    priority = 6

    def __init__(
        self,
        nlp_model=None,
        model_name: Optional[str] = None,
        ner_enabled: Optional[bool] = None,
        category_scorer: Optional[CategoryScorer] = None,
    ):
        enabled = settings.NER_ENABLED if ner_enabled is None else ner_enabled
        self.nlp_model = resolve_model(nlp_model, model_name or settings.SPACY_MODEL, enabled)
        self.categories = category_scorer if category_scorer is not None else CategoryScorer()
        self._patterns = [
            NAME_CONTEXT_PATTERN,
            CAPITALIZED_NAME_PATTERN,
            PREPOSITION_PLACE_PATTERN,
            VENUE_PATTERN,
            STREET_NAME_PATTERN,
            FALLBACK_PLACE_PATTERN,
            *ADDRESS_PATTERNS,
        ]

    def test(self, text: str) -> bool:
        if any(has_match(p, text) for p in self._patterns):
            return True
        if find_lexicon_terms(text, KINSHIP_TERMS):
            return True
        if self.categories.has_keywords(text):
            return True
        return bool(extract_ner_spans(text, self.nlp_model))

    def parse(self, text: str) -> List[ParsedTag]:
        tags: List[ParsedTag] = []
        ner_spans = extract_ner_spans(text, self.nlp_model)

        self.extract_people(text, ner_spans, tags)
        self.extract_ner_places(text, ner_spans, tags)
        self.extract_organizations(text, ner_spans, tags)
        self.extract_addresses(text, tags)
        self.extract_location_patterns(text, tags)
        self.extract_labels(text, tags)

        logger.debug("Entity parser produced %d candidate tags", len(tags))
        return tags

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    def extract_people(self, text: str, ner_spans, tags: List[ParsedTag]) -> None:
        for span in filter_spans(ner_spans, NER_PERSON_LABELS):
            self._add_person(text, span.start, span.end, PERSON_CONFIDENCE, tags)

        for start, end, _ in find_lexicon_terms(text, KINSHIP_TERMS):
            self._add_person(text, start, end, PERSON_CONFIDENCE, tags)

        for match in iter_matches(NAME_CONTEXT_PATTERN, text):
            tokens = list(WORD.finditer(match.group("name")))
            if tokens[0].group(0).lower().rstrip(".") in CONTEXT_NAME_STOPWORDS:
                continue
            start = match.start("name")
            end = start + self._name_extent(tokens)
            self._add_person(text, start, end, PERSON_CONFIDENCE, tags)

        for match in iter_matches(CAPITALIZED_NAME_PATTERN, text):
            candidate = match.group(1)
            if candidate.lower() in NAME_STOPLIST:
                continue
            self._add_person(text, match.start(1), match.end(1), CAPITALIZED_NAME_CONFIDENCE, tags)

    @staticmethod
    def _name_extent(tokens) -> int:
        """
        Length of the name that starts at the first of *tokens*.

        Capitalized tokens after the first one extend the name until a
        date word, a stoplisted word, or a token following a possessive.
        """
        end = tokens[0].end()
        previous = tokens[0].group(0)
        for token in tokens[1:]:
            word = token.group(0)
            lower = word.lower().rstrip(".")
            if previous.endswith(("'s", "’s")) or lower in NAME_TAIL_STOPWORDS or lower in NAME_STOPLIST:
                break
            end = token.end()
            previous = word
        return end

    def _add_person(
        self, text: str, start: int, end: int, confidence: float, tags: List[ParsedTag]
    ) -> None:
        name = normalize_person_name(text[start:end])
        if not name:
            return

        already_claimed = any(
            t.type == "person" and t.start_index <= start and t.end_index >= end
            for t in tags
        )
        if already_claimed:
            return

        tags.append(
            self.make_tag(
                "person", name, name, start, end, text, confidence,
                icon_name=PERSON_ICON, color=PERSON_COLOR,
            )
        )

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def extract_ner_places(self, text: str, ner_spans, tags: List[ParsedTag]) -> None:
        for span in filter_spans(ner_spans, NER_PLACE_LABELS):
            self._add_location(text, span.start, span.end, span.text, NER_PLACE_CONFIDENCE, tags)

    def extract_addresses(self, text: str, tags: List[ParsedTag]) -> None:
        for pattern in ADDRESS_PATTERNS:
            for match in iter_matches(pattern, text):
                start, end = match.span()
                if self._location_overlaps(tags, start, end):
                    continue
                self._add_location(text, start, end, match.group(0), ADDRESS_CONFIDENCE, tags)

    def extract_location_patterns(self, text: str, tags: List[ParsedTag]) -> None:
        for pattern in (PREPOSITION_PLACE_PATTERN, VENUE_PATTERN, STREET_NAME_PATTERN):
            for match in iter_matches(pattern, text):
                start, end = match.span()
                if self._location_covers(tags, start, end):
                    continue
                self._add_location(
                    text, start, end, match.group("place"), PATTERN_LOCATION_CONFIDENCE, tags
                )

        for match in iter_matches(FALLBACK_PLACE_PATTERN, text):
            phrase = self._trim_place_phrase(match.group("place"))
            if not phrase:
                continue
            start = match.start()
            end = match.start("place") + len(phrase)
            if self._location_overlaps(tags, start, end):
                continue
            self._add_location(text, start, end, phrase, FALLBACK_LOCATION_CONFIDENCE, tags)

    @staticmethod
    def _trim_place_phrase(phrase: str) -> str:
        """Cut a lowercase place phrase at the first function word."""
        end = 0
        for i, word in enumerate(WORD.finditer(phrase)):
            lower = word.group(0).lower()
            if lower in LOCATION_PHRASE_STOPWORDS:
                break
            if i == 0 and lower == "the":
                continue
            end = word.end()
        return phrase[:end]

    @staticmethod
    def _location_covers(tags: List[ParsedTag], start: int, end: int) -> bool:
        return any(
            t.type == "location" and t.start_index <= start and t.end_index >= end
            for t in tags
        )

    @staticmethod
    def _location_overlaps(tags: List[ParsedTag], start: int, end: int) -> bool:
        return any(
            t.type == "location" and spans_overlap((start, end), (t.start_index, t.end_index))
            for t in tags
        )

    def _add_location(
        self,
        text: str,
        start: int,
        end: int,
        place: str,
        confidence: float,
        tags: List[ParsedTag],
    ) -> None:
        value = WHITESPACE_RUN.sub(" ", place).strip()
        if not value:
            return
        tags.append(
            self.make_tag(
                "location", value, value, start, end, text, confidence,
                icon_name=LOCATION_ICON, color=LOCATION_COLOR,
            )
        )

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    def extract_organizations(self, text: str, ner_spans, tags: List[ParsedTag]) -> None:
        for span in filter_spans(ner_spans, NER_ORG_LABELS):
            value = WHITESPACE_RUN.sub(" ", span.text).strip()
            if any(t.type == "project" and (t.start_index, t.end_index) == (span.start, span.end) for t in tags):
                continue
            tags.append(
                self.make_tag(
                    "project", value, value, span.start, span.end, text,
                    ORGANIZATION_CONFIDENCE, icon_name=PROJECT_ICON, color=PROJECT_COLOR,
                )
            )

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def extract_labels(self, text: str, tags: List[ParsedTag]) -> None:
        selected = self.categories.select(self.categories.score(text))
        for s in selected:
            tags.append(
                self.make_tag(
                    "label",
                    s.category,
                    s.category.capitalize(),
                    s.start,
                    s.end,
                    text,
                    s.confidence,
                    icon_name=CATEGORY_ICONS.get(s.category, DEFAULT_LABEL_ICON),
                    color=CATEGORY_COLORS.get(s.category, DEFAULT_LABEL_COLOR),
                )
            )


