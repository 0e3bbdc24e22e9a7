"""
Search Domain - Fuzzy, alias-aware knowledge base search.

This domain handles:
- Levenshtein edit distance
- Tag alias query expansion
- Per-field similarity scoring
- Weighted ranking across document types
"""

from .aliases import expand_aliases, expand_query
from .contracts import SearchEngine, SimilarityScorer
from .engine import FuzzySearchEngine
from .fuzzy import calculate_similarity, levenshtein, substring_distance
from .models import (
    AliasDictionary,
    Document,
    DocumentType,
    ScoredMatch,
    SearchQuery,
    Tag,
)
from .weights import FIELD_WEIGHTS, weights_for

__all__ = [
    # Contracts
    "SearchEngine",
    "SimilarityScorer",
    # Models
    "AliasDictionary",
    "Document",
    "DocumentType",
    "ScoredMatch",
    "SearchQuery",
    "Tag",
    # Matching
    "levenshtein",
    "substring_distance",
    "calculate_similarity",
    "expand_aliases",
    "expand_query",
    "FIELD_WEIGHTS",
    "weights_for",
    # Implementations
    "FuzzySearchEngine",
]
