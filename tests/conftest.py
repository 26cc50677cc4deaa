"""
Shared test fixtures for the task parsing test suite.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List

import pytest

from taskparse.engine.smart_parser import SmartParser, build_default_parser
from taskparse.parsers.date_parser import DateTimeParser
from taskparse.parsers.entity_parser import EntityParser
from taskparse.parsers.priority_parser import PriorityParser

# Monday
FIXED_NOW = datetime(2026, 10, 19, 9, 0)


# ==========================================================================
# Clock
# ==========================================================================

@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


# ==========================================================================
# Fake spaCy model
# ==========================================================================

@dataclass
class FakeEnt:
    text: str
    label_: str
    start_char: int
    end_char: int


class FakeDoc:
    def __init__(self, ents: List[FakeEnt]):
        self.ents = ents


class FakeNLP:
    """
    Callable standing in for a spaCy Language object.

    Reports every configured (surface, label) pair found in the text.
    """

    def __init__(self, entities):
        self.entities = entities
        self.calls = 0

    def __call__(self, text: str) -> FakeDoc:
        self.calls += 1
        ents = []
        for surface, label in self.entities:
            start = text.find(surface)
            if start != -1:
                ents.append(FakeEnt(surface, label, start, start + len(surface)))
        return FakeDoc(ents)


@pytest.fixture
def fake_nlp_factory():
    return FakeNLP


# ==========================================================================
# Parsers
# ==========================================================================

@pytest.fixture
def date_parser(fixed_clock):
    return DateTimeParser(clock=fixed_clock)


@pytest.fixture
def priority_parser():
    return PriorityParser()


@pytest.fixture
def entity_parser():
    return EntityParser(ner_enabled=False)


@pytest.fixture
def smart_parser(fixed_clock) -> SmartParser:
    return build_default_parser(clock=fixed_clock, ner_enabled=False)
