"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class DocumentType(str, Enum):
    """Kinds of knowledge base documents."""

    SESSION = "session"
    DECISION = "decision"
    PATTERN = "pattern"
    RULE = "rule"


class Tag(BaseModel):
    """Canonical tag with its synonyms (any language or script)."""

    id: str
    label: str
    aliases: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def terms(self) -> list[str]:
        """Id, label and aliases in declaration order."""
        return [self.id, self.label, *self.aliases]


class AliasDictionary(BaseModel):
    """Read-only tag table, loaded once and shared by every search."""

    tags: tuple[Tag, ...] = ()

    model_config = {"frozen": True}

    def __len__(self) -> int:
        return len(self.tags)


class Document(BaseModel):
    """
    A knowledge base entry as seen by the search engine.

    ``fields`` maps a field label to its text, or to a list of texts for
    repeated fields such as interactions.
    """

    type: DocumentType
    id: str = Field(..., min_length=1)
    title: str = ""
    fields: dict[str, str | list[str]] = Field(default_factory=dict)
    recency: datetime = EPOCH

    @field_validator("recency", mode="before")
    @classmethod
    def _default_recency(cls, value: object) -> object:
        return EPOCH if value is None or value == "" else value

    @field_validator("recency")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def field_text(self, name: str) -> str | list[str] | None:
        """Look up a field; ``title`` falls back to the document title."""
        value = self.fields.get(name)
        if value is None and name == "title":
            return self.title or None
        return value


class ScoredMatch(BaseModel):
    """Single ranked search result."""

    type: DocumentType
    id: str
    title: str
    score: int = Field(..., ge=0)
    matched_fields: list[str] = Field(default_factory=list, alias="matchedFields")

    model_config = {"populate_by_name": True}


class SearchQuery(BaseModel):
    """Search request."""

    query: str
    limit: int | None = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    types: frozenset[DocumentType] | None = None
    split_keywords: bool = False

    model_config = {"frozen": True}
