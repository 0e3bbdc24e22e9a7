"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from .models import Document, ScoredMatch, SearchQuery


@runtime_checkable
class SimilarityScorer(Protocol):
    """Contract for scoring one field text against one search term."""

    def __call__(self, text: str, term: str) -> int:
        """Return a non-negative integer similarity."""
        ...


@runtime_checkable
class SearchEngine(Protocol):
    """Contract for search implementations."""

    def search(
        self,
        query: SearchQuery | str,
        corpus: Iterable[Document | Mapping[str, Any]],
    ) -> list[ScoredMatch]:
        """Rank the corpus against a query."""
        ...
