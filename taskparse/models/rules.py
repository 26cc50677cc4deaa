"""
Typed Pydantic models for the declarative rule tables.

Tables live in taskparse.config.constants as plain dicts; parsers run
them through these models at construction time so a malformed table
fails immediately instead of at the first matching call.
"""
from __future__ import annotations

from typing import List, Literal, Tuple

import regex
from pydantic import BaseModel, Field, field_validator, model_validator


class PriorityRule(BaseModel):
    """One row of the priority table: pattern -> (level, base confidence)."""

    pattern: str = Field(..., min_length=1, description="Regex, matched case-insensitively.")
    level: Literal["low", "medium", "high"]
    confidence: float = Field(..., ge=0.0, le=1.0)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            compiled = regex.compile(v, regex.IGNORECASE)
        except regex.error as e:
            raise ValueError(f"pattern does not compile: {e}") from e
        if compiled.fullmatch(""):
            raise ValueError("pattern must not match the empty string")
        return v

    def compile(self) -> "regex.Pattern":
        return regex.compile(self.pattern, regex.IGNORECASE)


class CategoryRule(BaseModel):
    """A semantic category and the keywords that vote for it."""

    name: str = Field(..., min_length=1)
    keywords: List[str] = Field(..., min_length=1)

    @field_validator("keywords")
    @classmethod
    def validate_keywords(cls, v: List[str]) -> List[str]:
        cleaned = [kw.strip().lower() for kw in v]
        if any(not kw for kw in cleaned):
            raise ValueError("keywords must be non-empty strings")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("keywords must be unique within a category")
        return cleaned

    def compile(self) -> "regex.Pattern":
        # Longest keyword first so phrases win over their own prefixes
        ordered = sorted(self.keywords, key=len, reverse=True)
        alternation = "|".join(regex.escape(kw) for kw in ordered)
        return regex.compile(rf"\b(?:{alternation})\b", regex.IGNORECASE)


class CategoryTable(BaseModel):
    """All categories plus the groups in which only one may be emitted."""

    categories: List[CategoryRule] = Field(..., min_length=1)
    exclusive_groups: List[Tuple[str, ...]] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_groups(self) -> "CategoryTable":
        names = [c.name for c in self.categories]
        if len(set(names)) != len(names):
            raise ValueError("category names must be unique")
        seen: set = set()
        for group in self.exclusive_groups:
            if len(group) < 2:
                raise ValueError(f"exclusive group needs at least two categories: {group}")
            for name in group:
                if name not in names:
                    raise ValueError(f"exclusive group references unknown category: {name}")
                if name in seen:
                    raise ValueError(f"category {name} appears in more than one exclusive group")
                seen.add(name)
        return self
