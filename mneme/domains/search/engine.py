"""
Fuzzy Search Engine - Alias expansion plus weighted per-field scoring.

Features:
- Tag alias expansion (computed once per search)
- Typo-tolerant per-field similarity
- Per-type field weights
- Deterministic ordering (score, recency, id)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from .aliases import expand_query
from .contracts import SimilarityScorer
from .fuzzy import calculate_similarity
from .models import AliasDictionary, Document, ScoredMatch, SearchQuery, Tag
from .weights import FIELD_WEIGHTS, FieldWeights, weights_for

logger = logging.getLogger(__name__)

__all__ = ["FuzzySearchEngine"]


class FuzzySearchEngine:
    """
    Rank knowledge base documents against a free-text query.

    The engine holds no per-search state: every call is a pure function of
    the query, the corpus passed in and the alias dictionary given here.

    Example:
        >>> engine = FuzzySearchEngine(aliases)
        >>> matches = engine.search(SearchQuery(query="auth", limit=5), corpus)
    """

    def __init__(
        self,
        aliases: AliasDictionary | Iterable[Tag] = (),
        field_weights: FieldWeights = FIELD_WEIGHTS,
        scorer: SimilarityScorer = calculate_similarity,
    ) -> None:
        """
        Initialize search engine.

        Args:
            aliases: Alias dictionary used for query expansion
            field_weights: Per-type field weight table
            scorer: Field/term similarity function
        """
        if not isinstance(aliases, AliasDictionary):
            aliases = AliasDictionary(tags=tuple(aliases))
        self._aliases = aliases
        self._field_weights = field_weights
        self._scorer = scorer

    @property
    def aliases(self) -> AliasDictionary:
        return self._aliases

    def expand(self, query: str, split_keywords: bool = False) -> list[str]:
        """Expansion set for a query."""
        return expand_query(query, self._aliases, split_keywords=split_keywords)

    def search(
        self,
        query: SearchQuery | str,
        corpus: Iterable[Document | Mapping[str, Any]],
    ) -> list[ScoredMatch]:
        """
        Execute fuzzy search.

        Args:
            query: Search query parameters (a bare string uses defaults)
            corpus: Documents, or raw mappings validated on the fly;
                invalid entries are skipped

        Returns:
            Matches with a positive score, best first
        """
        if isinstance(query, str):
            query = SearchQuery(query=query)

        if not query.query.strip():
            return []

        terms = self.expand(query.query, split_keywords=query.split_keywords)

        ranked: list[tuple[ScoredMatch, float]] = []
        scanned = 0
        for document in self._documents(corpus):
            if query.types is not None and document.type not in query.types:
                continue
            scanned += 1
            match = self.score_document(document, terms)
            if match is not None:
                ranked.append((match, document.recency.timestamp()))

        ranked.sort(key=lambda item: (-item[0].score, -item[1], item[0].id))

        results: list[ScoredMatch] = []
        seen: set[tuple[str, str]] = set()
        for match, _ in ranked:
            key = (match.type.value, match.id)
            if key in seen:
                continue
            seen.add(key)
            results.append(match)

        end = None if query.limit is None else query.offset + query.limit
        results = results[query.offset : end]

        logger.info(
            "Fuzzy search: query='%s' -> %d results (terms=%d, documents=%d)",
            query.query[:50],
            len(results),
            len(terms),
            scanned,
        )

        return results

    def score_document(self, document: Document, terms: list[str]) -> ScoredMatch | None:
        """
        Score one document against an expansion set.

        Returns:
            The match, or None when nothing scored
        """
        total = 0
        matched_fields: list[str] = []

        for field_name, weight in weights_for(document.type, self._field_weights).items():
            value = document.field_text(field_name)
            if not value or weight <= 0:
                continue
            field_score = self._score_field(value, terms)
            if field_score > 0:
                total += weight * field_score
                if field_name not in matched_fields:
                    matched_fields.append(field_name)

        if total == 0:
            return None

        return ScoredMatch(
            type=document.type,
            id=document.id,
            title=document.title or document.id,
            score=total,
            matched_fields=matched_fields,
        )

    def _score_field(self, value: str | list[str], terms: list[str]) -> int:
        """Sum over terms of the best score among the field's texts."""
        texts = [value] if isinstance(value, str) else [v for v in value if isinstance(v, str)]
        total = 0
        for term in terms:
            total += max((max(0, self._scorer(text, term)) for text in texts), default=0)
        return total

    @staticmethod
    def _documents(corpus: Iterable[Document | Mapping[str, Any]]) -> Iterable[Document]:
        """Yield valid documents, skipping anything that fails validation."""
        for item in corpus:
            if isinstance(item, Document):
                yield item
                continue
            if not isinstance(item, Mapping):
                logger.debug("Skipping non-document corpus entry: %r", type(item))
                continue
            try:
                yield Document.model_validate(item)
            except ValidationError as e:
                logger.debug(
                    "Skipping invalid document %r: %d errors",
                    item.get("id"),
                    e.error_count(),
                )
