"""
Injection Models - Policy knobs for automatic context injection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from mneme.domains.search.models import DocumentType

if TYPE_CHECKING:
    from mneme.config import Settings


class InjectionPolicy(BaseModel):
    """Which matches are strong enough to be injected unasked."""

    min_prompt_length: int = Field(default=10, ge=0)
    max_prompt_length: int = Field(default=4000, ge=1)
    relevance_floor: int = Field(default=10, ge=0)
    max_results: int = Field(default=3, ge=1)
    allowed_types: frozenset[DocumentType] = frozenset(
        {DocumentType.SESSION, DocumentType.DECISION}
    )
    skip_prefixes: tuple[str, ...] = ("/mneme",)

    # Approved knowledge (second block)
    approved_statuses: frozenset[str] = frozenset({"approved", "active"})
    approved_types: frozenset[DocumentType] = frozenset(
        {DocumentType.RULE, DocumentType.DECISION, DocumentType.PATTERN}
    )
    approved_floor: int = Field(default=2, ge=0)
    approved_max_results: int = Field(default=5, ge=0)
    priority_boosts: dict[str, int] = Field(default_factory=lambda: {"p0": 2, "p1": 1})

    model_config = {"frozen": True}

    def is_approved(self, status: object) -> bool:
        """Whether a document status marks it as team-approved."""
        return isinstance(status, str) and status.strip().lower() in self.approved_statuses

    def priority_boost(self, priority: object) -> int:
        """Score bonus for a priority label (p0, p1, ...)."""
        if not isinstance(priority, str):
            return 0
        return self.priority_boosts.get(priority.strip().lower(), 0)

    @classmethod
    def from_settings(cls, settings: Settings) -> InjectionPolicy:
        """Build the policy from application settings."""
        return cls(
            min_prompt_length=settings.injection_min_prompt_length,
            max_prompt_length=settings.injection_max_prompt_length,
            relevance_floor=settings.injection_relevance_floor,
            max_results=settings.injection_max_results,
            allowed_types=frozenset(settings.injection_types),
            skip_prefixes=tuple(settings.injection_skip_prefixes),
            approved_floor=settings.injection_approved_floor,
            approved_max_results=settings.injection_approved_max_results,
        )


class ApprovedMatch(BaseModel):
    """Approved rule, decision or pattern selected for injection."""

    type: DocumentType
    id: str
    text: str
    priority: str | None = None
    score: int = Field(..., ge=0)
