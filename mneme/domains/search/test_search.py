"""
Tests for search domain models and the fuzzy search engine.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import pytest

from .engine import FuzzySearchEngine
from .models import (
    EPOCH,
    AliasDictionary,
    Document,
    DocumentType,
    ScoredMatch,
    SearchQuery,
    Tag,
)
from .weights import BODY_WEIGHT, FIELD_WEIGHTS, TAGS_WEIGHT, TITLE_WEIGHT


def _doc(
    doc_type: DocumentType,
    doc_id: str,
    title: str = "",
    recency: str | None = None,
    **fields: Any,
) -> Document:
    return Document(type=doc_type, id=doc_id, title=title, fields=fields, recency=recency)


@pytest.fixture
def aliases() -> AliasDictionary:
    """Alias dictionary shared by the engine tests."""
    return AliasDictionary(
        tags=(
            Tag(id="auth", label="認証", aliases=["authentication", "login", "認証", "jwt"]),
            Tag(id="frontend", label="Frontend", aliases=["front", "フロント", "client"]),
        )
    )


@pytest.fixture
def corpus() -> list[Document]:
    """A small mixed corpus."""
    return [
        _doc(
            DocumentType.SESSION,
            "s1",
            "Implement authentication flow",
            "2026-02-01T10:00:00Z",
            tags=["auth"],
            interactions=["added login and token refresh"],
        ),
        _doc(
            DocumentType.SESSION,
            "s2",
            "Refactor dashboard layout",
            "2026-02-05T10:00:00Z",
            tags=["frontend"],
            interactions=["moved auth check into middleware"],
        ),
        _doc(
            DocumentType.DECISION,
            "d1",
            "Use JWT for API auth",
            "2026-01-10T10:00:00Z",
            decision="Stateless tokens",
            tags=["auth"],
        ),
        _doc(
            DocumentType.PATTERN,
            "p1",
            "Null check before render",
            description="Null check before render",
            tags=["frontend"],
        ),
        _doc(
            DocumentType.RULE,
            "r1",
            "Prefer const over let",
            rule="Prefer const over let",
            category="style",
        ),
    ]


@pytest.fixture
def engine(aliases: AliasDictionary) -> FuzzySearchEngine:
    """Engine with the shared alias dictionary."""
    return FuzzySearchEngine(aliases)


# --- Model Tests ---


def test_search_query_defaults() -> None:
    """Test SearchQuery with minimal fields."""
    query = SearchQuery(query="auth")
    assert query.limit == 20
    assert query.offset == 0
    assert query.types is None
    assert query.split_keywords is False


def test_search_query_limit_validation() -> None:
    """Test SearchQuery limit must be 1-100 or None."""
    assert SearchQuery(query="x", limit=1).limit == 1
    assert SearchQuery(query="x", limit=100).limit == 100
    assert SearchQuery(query="x", limit=None).limit is None

    with pytest.raises(ValueError):
        SearchQuery(query="x", limit=0)
    with pytest.raises(ValueError):
        SearchQuery(query="x", limit=101)
    with pytest.raises(ValueError):
        SearchQuery(query="x", offset=-1)


def test_search_query_is_immutable() -> None:
    """Test SearchQuery is frozen."""
    query = SearchQuery(query="auth")
    with pytest.raises(Exception):
        query.query = "changed"  # type: ignore


def test_search_query_types_coerced() -> None:
    """Test type filters accept plain strings."""
    query = SearchQuery(query="auth", types={"session", "rule"})
    assert query.types == frozenset({DocumentType.SESSION, DocumentType.RULE})


def test_tag_terms_order() -> None:
    """Test id, label and aliases are exposed in declaration order."""
    tag = Tag(id="auth", label="Auth", aliases=["login"])
    assert tag.terms == ["auth", "Auth", "login"]


def test_document_naive_recency_is_utc() -> None:
    """Test naive timestamps are read as UTC."""
    doc = Document(type="session", id="s", recency=datetime(2026, 1, 1, 12, 0))
    assert doc.recency == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_document_missing_recency_is_epoch() -> None:
    """Test missing timestamps sort as oldest."""
    assert Document(type="session", id="s").recency == EPOCH
    assert Document(type="session", id="s", recency=None).recency == EPOCH


def test_document_title_field_fallback() -> None:
    """Test the title field falls back to the document title."""
    doc = Document(type="decision", id="d", title="Use JWT")
    assert doc.field_text("title") == "Use JWT"
    assert doc.field_text("reasoning") is None


def test_document_rejects_unknown_type() -> None:
    """Test the document type is a closed set."""
    with pytest.raises(ValueError):
        Document(type="unit", id="u1")


def test_scored_match_serializes_camel_case() -> None:
    """Test matched fields use the external key name."""
    match = ScoredMatch(type="session", id="s1", title="T", score=3, matched_fields=["title"])
    dumped = match.model_dump(mode="json", by_alias=True)
    assert dumped == {
        "type": "session",
        "id": "s1",
        "title": "T",
        "score": 3,
        "matchedFields": ["title"],
    }


def test_scored_match_rejects_negative_score() -> None:
    """Test scores are non-negative."""
    with pytest.raises(ValueError):
        ScoredMatch(type="session", id="s1", title="T", score=-1)


# --- Field Weight Tests ---


def test_field_weights_cover_every_document_type() -> None:
    """Test the weight table is exhaustive over document types."""
    assert set(FIELD_WEIGHTS) == set(DocumentType)


def test_field_weights_share_one_scale() -> None:
    """Test every type has one primary field and the same ordering."""
    assert TITLE_WEIGHT > TAGS_WEIGHT > BODY_WEIGHT > 0
    for doc_type, weights in FIELD_WEIGHTS.items():
        primary = [name for name, weight in weights.items() if weight == TITLE_WEIGHT]
        assert len(primary) == 1, doc_type
        assert max(weights.values()) == TITLE_WEIGHT


# --- FuzzySearchEngine Tests ---


def test_search_ranks_alias_matches(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test title and tag hits outrank a body-only hit."""
    results = engine.search("auth", corpus)

    assert [r.id for r in results] == ["s1", "d1", "s2"]
    assert results[0].matched_fields == ["title", "tags", "interactions"]
    assert results[2].matched_fields == ["interactions"]


def test_search_reverse_alias_lookup(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test searching by a foreign-script alias finds canonical-tag documents."""
    ids = [r.id for r in engine.search("認証", corpus)]
    assert "s1" in ids
    assert "d1" in ids


def test_search_scores_are_positive_integers(
    engine: FuzzySearchEngine, corpus: list[Document]
) -> None:
    """Test zero-score documents never appear."""
    results = engine.search("auth", corpus)
    assert results
    assert all(isinstance(r.score, int) and r.score > 0 for r in results)
    assert all(len(r.matched_fields) == len(set(r.matched_fields)) for r in results)


def test_search_sorted_by_score(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test results are sorted best first."""
    scores = [r.score for r in engine.search("front", corpus)]
    assert scores == sorted(scores, reverse=True)


def test_search_is_deterministic(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test repeated runs produce identical output."""
    first = [r.model_dump(mode="json", by_alias=True) for r in engine.search("auth", corpus)]
    second = [r.model_dump(mode="json", by_alias=True) for r in engine.search("auth", corpus)]
    assert json.dumps(first, ensure_ascii=False) == json.dumps(second, ensure_ascii=False)


def test_search_top_k_are_primary_field_hits() -> None:
    """Test documents with the term in their primary field fill the top K."""
    corpus = [
        _doc(DocumentType.SESSION, "a", "Billing export", tags=["reports"]),
        _doc(DocumentType.PATTERN, "b", "Retry billing webhooks", description="Retry billing webhooks"),
        _doc(DocumentType.RULE, "c", "Prefer const over let", rule="Prefer const over let"),
        _doc(DocumentType.DECISION, "d", "Use Postgres", decision="Relational data"),
    ]
    results = FuzzySearchEngine().search("billing", corpus)
    assert {r.id for r in results[:2]} == {"a", "b"}
    assert len(results) == 2


def test_search_title_hit_outranks_body_hit() -> None:
    """Test an exact body hit still ranks below a title hit of another type."""
    corpus = [
        _doc(DocumentType.SESSION, "body", "Weekly sync", interactions=["billing export"]),
        _doc(DocumentType.DECISION, "title", "Billing export format"),
    ]
    results = FuzzySearchEngine().search("billing export", corpus)
    assert [r.id for r in results] == ["title", "body"]


def test_search_ties_broken_by_recency_then_id() -> None:
    """Test equal scores order newest first, then by id."""
    corpus = [
        _doc(DocumentType.SESSION, "b-old", "Cache warmup", "2025-01-01T00:00:00Z"),
        _doc(DocumentType.SESSION, "c-new", "Cache warmup", "2026-01-01T00:00:00Z"),
        _doc(DocumentType.SESSION, "a-old", "Cache warmup", "2025-01-01T00:00:00Z"),
    ]
    results = FuzzySearchEngine().search("cache warmup", corpus)
    assert [r.id for r in results] == ["c-new", "a-old", "b-old"]


def test_search_limit_and_offset(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test truncation happens after sorting."""
    assert [r.id for r in engine.search(SearchQuery(query="auth", limit=1), corpus)] == ["s1"]
    page = engine.search(SearchQuery(query="auth", limit=1, offset=1), corpus)
    assert [r.id for r in page] == ["d1"]
    assert engine.search(SearchQuery(query="auth", offset=10), corpus) == []


def test_search_unlimited(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test a None limit returns every match."""
    results = engine.search(SearchQuery(query="auth", limit=None), corpus)
    assert len(results) == 3


def test_search_type_filter(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test results can be restricted to some document types."""
    results = engine.search(SearchQuery(query="auth", types={DocumentType.DECISION}), corpus)
    assert [r.id for r in results] == ["d1"]


def test_search_typo_tolerance(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test a misspelled query still finds the document."""
    results = engine.search("refactr", corpus)
    assert [r.id for r in results] == ["s2"]


def test_search_expands_query_once(
    monkeypatch: pytest.MonkeyPatch, engine: FuzzySearchEngine, corpus: list[Document]
) -> None:
    """Test one expansion set is reused for every document and field."""
    from . import engine as engine_module

    calls: list[str] = []
    expand_query = engine_module.expand_query

    def counting_expand_query(query: str, *args: Any, **kwargs: Any) -> list[str]:
        calls.append(query)
        return expand_query(query, *args, **kwargs)

    monkeypatch.setattr(engine_module, "expand_query", counting_expand_query)
    results = engine.search(SearchQuery(query="auth login", split_keywords=True), corpus)

    assert len(results) >= 2
    assert calls == ["auth login"]


def test_search_empty_query(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test an empty or blank query yields no results."""
    assert engine.search("", corpus) == []
    assert engine.search("   ", corpus) == []


def test_search_empty_corpus(engine: FuzzySearchEngine) -> None:
    """Test an empty corpus yields no results."""
    assert engine.search("auth", []) == []


def test_search_skips_invalid_documents(engine: FuzzySearchEngine) -> None:
    """Test malformed corpus entries are skipped, not raised."""
    corpus: list[Any] = [
        {"type": "unit", "id": "u1", "title": "auth unit"},
        {"type": "session", "id": "", "title": "auth empty id"},
        {"title": "auth without type"},
        {"type": "session", "id": "bad-date", "title": "auth", "recency": "not a date"},
        "not a mapping",
        {"type": "session", "id": "ok", "title": "auth", "recency": "2026-02-01T00:00:00Z"},
    ]
    results = engine.search("auth", corpus)
    assert [r.id for r in results] == ["ok"]


def test_search_ignores_unmapped_fields(engine: FuzzySearchEngine) -> None:
    """Test fields missing from the weight table contribute nothing."""
    corpus = [_doc(DocumentType.SESSION, "s", "", secret="auth auth auth")]
    assert engine.search("auth", corpus) == []


def test_search_unmapped_type_is_invisible(corpus: list[Document]) -> None:
    """Test a type absent from a custom weight table never matches."""
    weights = {DocumentType.DECISION: {"title": 3}}
    results = FuzzySearchEngine(field_weights=weights).search("auth", corpus)
    assert [r.id for r in results] == ["d1"]


def test_search_weight_scales_field_score(corpus: list[Document]) -> None:
    """Test the weight multiplies each field's contribution."""
    results = FuzzySearchEngine(scorer=lambda text, term: 1).search("anything", corpus[:1])
    # title 3 + tags 2 + interactions 1, one term
    assert results[0].score == 6


def test_search_list_field_uses_best_item() -> None:
    """Test repeated fields count their best item, not every item."""
    corpus = [
        _doc(DocumentType.SESSION, "s", "", interactions=["deploy", "deploy", "deploy"]),
    ]
    results = FuzzySearchEngine().search("deploy", corpus)
    assert results[0].score == 10


def test_search_deduplicates_documents() -> None:
    """Test the same document listed twice appears once."""
    doc = _doc(DocumentType.RULE, "r1", "Prefer const", rule="Prefer const")
    results = FuzzySearchEngine().search("const", [doc, doc])
    assert len(results) == 1


def test_search_accepts_raw_mappings(engine: FuzzySearchEngine) -> None:
    """Test validated mappings work like documents."""
    corpus = [{"type": "decision", "id": "d9", "title": "Adopt JWT"}]
    results = engine.search("auth", corpus)
    assert [r.id for r in results] == ["d9"]


def test_search_keyword_mode(engine: FuzzySearchEngine, corpus: list[Document]) -> None:
    """Test keyword mode matches documents a whole-phrase search misses."""
    assert engine.search("fix login bug", corpus) == []

    results = engine.search(SearchQuery(query="fix login bug", split_keywords=True), corpus)
    assert "s1" in [r.id for r in results]


def test_search_title_falls_back_to_id(engine: FuzzySearchEngine) -> None:
    """Test untitled documents are shown by id."""
    corpus = [_doc(DocumentType.SESSION, "auth-notes", "", tags=["auth"])]
    results = engine.search("auth", corpus)
    assert results[0].title == "auth-notes"


def test_expand_uses_engine_dictionary(engine: FuzzySearchEngine) -> None:
    """Test the engine exposes its expansion set."""
    assert "jwt" in engine.expand("auth")
    assert engine.expand("unknown") == ["unknown"]
