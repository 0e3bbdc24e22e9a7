"""
Context Injector - Surface related prior work for every new prompt.

Runs the fuzzy search on the user's input and keeps only strong matches of
the allowed types. Team-approved rules, decisions and patterns that relate
to the prompt are reported in a second block. Returning None (no block at
all) is the normal, silent outcome; it is never an error.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from mneme.domains.search.contracts import SearchEngine
from mneme.domains.search.models import Document, DocumentType, ScoredMatch, SearchQuery

from .models import ApprovedMatch, InjectionPolicy

logger = logging.getLogger(__name__)

__all__ = ["ContextInjector", "render_approved", "render_context"]

CONTEXT_OPEN = "<mneme-context>"
CONTEXT_CLOSE = "</mneme-context>"
RULES_OPEN = "<mneme-rules>"
RULES_CLOSE = "</mneme-rules>"

# Field holding the statement to inject; other types use the title
APPROVED_TEXT_FIELDS = {
    DocumentType.RULE: "rule",
    DocumentType.DECISION: "decision",
}


def _inline(text: str) -> str:
    """One line of text that cannot open or close a block."""
    return html.escape(" ".join(text.split()), quote=False)


def render_context(matches: list[ScoredMatch]) -> str:
    """Render matches as a compact background-context block."""
    lines = [CONTEXT_OPEN, "Related context found:"]
    for match in matches:
        fields = ",".join(_inline(f) for f in match.matched_fields)
        lines.append(
            f"[{match.type.value}:{_inline(match.id)}] {_inline(match.title)} | match: {fields}"
        )
    lines.append("Use `mneme search` for details.")
    lines.append(CONTEXT_CLOSE)
    return "\n".join(lines)


def render_approved(matches: list[ApprovedMatch]) -> str:
    """Render approved knowledge as a block of rules to apply."""
    lines = [RULES_OPEN, "Approved development rules (apply during this response):"]
    for match in matches:
        priority = _inline(match.priority) if match.priority else "-"
        lines.append(f"[{match.type.value}:{_inline(match.id)}] ({priority}) {_inline(match.text)}")
    lines.append(RULES_CLOSE)
    return "\n".join(lines)


class ContextInjector:
    """
    Threshold-gated context injection.

    Example:
        >>> injector = ContextInjector(engine)
        >>> block = injector.build_context(prompt, corpus)
        >>> if block:
        ...     print(block)
    """

    def __init__(
        self,
        engine: SearchEngine,
        policy: InjectionPolicy | None = None,
    ) -> None:
        self._engine = engine
        self._policy = policy or InjectionPolicy()

    @property
    def policy(self) -> InjectionPolicy:
        return self._policy

    def qualifies(self, prompt: str) -> bool:
        """Whether a prompt should trigger a search at all."""
        text = prompt.strip()
        if len(text) < self._policy.min_prompt_length:
            return False
        return not any(text.startswith(prefix) for prefix in self._policy.skip_prefixes)

    def select(self, matches: Iterable[ScoredMatch]) -> list[ScoredMatch]:
        """Keep strong matches of allowed types, best first, capped."""
        kept = [
            match
            for match in matches
            if match.score >= self._policy.relevance_floor
            and match.type in self._policy.allowed_types
        ]
        return kept[: self._policy.max_results]

    def _query(self, prompt: str, types: frozenset[DocumentType] | None = None) -> SearchQuery:
        return SearchQuery(
            query=prompt.strip()[: self._policy.max_prompt_length],
            limit=None,
            types=types,
            split_keywords=True,
        )

    def find(
        self,
        prompt: str,
        corpus: Iterable[Document | Mapping[str, Any]],
    ) -> list[ScoredMatch]:
        """Matches worth injecting for a prompt (possibly empty)."""
        if not self.qualifies(prompt):
            return []
        return self.select(self._engine.search(self._query(prompt), corpus))

    def find_approved(
        self,
        prompt: str,
        corpus: Iterable[Document | Mapping[str, Any]],
    ) -> list[ApprovedMatch]:
        """
        Approved rules, decisions and patterns related to a prompt.

        Only documents whose ``status`` is approved take part. A matched
        document's score gains its priority boost before the floor applies.
        """
        if not self.qualifies(prompt) or self._policy.approved_max_results == 0:
            return []

        approved = {(doc.type, doc.id): doc for doc in self._approved_documents(corpus)}
        if not approved:
            return []

        matches = self._engine.search(
            self._query(prompt, self._policy.approved_types), list(approved.values())
        )

        selected: list[ApprovedMatch] = []
        for match in matches:
            document = approved.get((match.type, match.id))
            if document is None:
                continue
            priority = document.fields.get("priority")
            priority = priority if isinstance(priority, str) and priority else None
            score = match.score + self._policy.priority_boost(priority)
            if score < self._policy.approved_floor:
                continue
            selected.append(
                ApprovedMatch(
                    type=match.type,
                    id=match.id,
                    text=self._statement(document),
                    priority=priority,
                    score=score,
                )
            )

        selected.sort(key=lambda m: -m.score)
        return selected[: self._policy.approved_max_results]

    def build_context(
        self,
        prompt: str,
        corpus: Iterable[Document | Mapping[str, Any]],
    ) -> str | None:
        """
        Build the context to inject for a prompt.

        Args:
            prompt: Raw user input
            corpus: Live knowledge base snapshot

        Returns:
            The related-context block and/or the approved-rules block,
            separated by a blank line, or None when nothing qualifies
        """
        if not self.qualifies(prompt):
            return None

        documents = list(corpus)
        blocks: list[str] = []

        matches = self.find(prompt, documents)
        if matches:
            blocks.append(render_context(matches))

        approved = self.find_approved(prompt, documents)
        if approved:
            blocks.append(render_approved(approved))

        if not blocks:
            return None

        logger.debug(
            "Injecting %d related and %d approved documents", len(matches), len(approved)
        )
        return "\n\n".join(blocks)

    def _approved_documents(
        self, corpus: Iterable[Document | Mapping[str, Any]]
    ) -> Iterator[Document]:
        for item in corpus:
            if not isinstance(item, Document):
                if not isinstance(item, Mapping):
                    continue
                try:
                    item = Document.model_validate(item)
                except ValidationError:
                    continue
            if item.type in self._policy.approved_types and self._policy.is_approved(
                item.fields.get("status")
            ):
                yield item

    @staticmethod
    def _statement(document: Document) -> str:
        name = APPROVED_TEXT_FIELDS.get(document.type)
        value = document.fields.get(name) if name else None
        if isinstance(value, str) and value.strip():
            return value
        return document.title or document.id
