"""
Query Expansion - Tag alias lookup.

A query that names a tag by its id, label or any alias expands to every
spelling of that tag, so "auth", "login" and "認証" all find each other.
Lookup is exact and case-insensitive; fuzziness is left to the scorer.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import AliasDictionary, Tag

__all__ = ["MIN_KEYWORD_LENGTH", "expand_aliases", "expand_query"]

MIN_KEYWORD_LENGTH = 3

_WHITESPACE = re.compile(r"\s+")


def _add_unique(terms: list[str], seen: set[str], candidates: Iterable[str]) -> None:
    for candidate in candidates:
        key = candidate.lower()
        if key not in seen:
            seen.add(key)
            terms.append(candidate)


def _tags_of(tags: AliasDictionary | Iterable[Tag]) -> Iterable[Tag]:
    return tags.tags if isinstance(tags, AliasDictionary) else tags


def expand_aliases(query: str, tags: AliasDictionary | Iterable[Tag]) -> list[str]:
    """
    Expand a query into its equivalent terms.

    Args:
        query: Raw query text
        tags: Alias dictionary (or any iterable of tags)

    Returns:
        The union of id, label and aliases of every tag the query names,
        deduplicated case-insensitively in declaration order; ``[query]``
        when no tag matches.
    """
    needle = query.lower()
    terms: list[str] = []
    seen: set[str] = set()

    for tag in _tags_of(tags):
        if any(term.lower() == needle for term in tag.terms):
            _add_unique(terms, seen, tag.terms)

    return terms or [query]


def expand_query(
    query: str,
    tags: AliasDictionary | Iterable[Tag],
    split_keywords: bool = False,
) -> list[str]:
    """
    Build the expansion set used for one search.

    With ``split_keywords`` the whitespace-separated keywords of a longer
    query (at least ``MIN_KEYWORD_LENGTH`` characters each) are expanded
    as well and appended after the whole-query expansion.
    """
    tag_list = list(_tags_of(tags))
    terms: list[str] = []
    seen: set[str] = set()
    _add_unique(terms, seen, expand_aliases(query, tag_list))

    if split_keywords:
        keywords = [
            token for token in _WHITESPACE.split(query.strip())
            if len(token) >= MIN_KEYWORD_LENGTH
        ]
        for keyword in keywords:
            _add_unique(terms, seen, expand_aliases(keyword, tag_list))

    return terms
