"""
Field Weights - Relative importance of each document field.

Every document type uses the same scale, so a title hit always outranks a
body hit whatever the type: title/summary 3, tags/classification 2, free
text 1. Fields not listed here are not searched.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .models import DocumentType

__all__ = [
    "BODY_WEIGHT",
    "FIELD_WEIGHTS",
    "TAGS_WEIGHT",
    "TITLE_WEIGHT",
    "FieldWeights",
    "weights_for",
]

TITLE_WEIGHT = 3
TAGS_WEIGHT = 2
BODY_WEIGHT = 1

FieldWeights = Mapping[DocumentType, Mapping[str, int]]

FIELD_WEIGHTS: FieldWeights = MappingProxyType(
    {
        DocumentType.SESSION: MappingProxyType(
            {
                "title": TITLE_WEIGHT,
                "tags": TAGS_WEIGHT,
                "goal": BODY_WEIGHT,
                "description": BODY_WEIGHT,
                "interactions": BODY_WEIGHT,
            }
        ),
        DocumentType.DECISION: MappingProxyType(
            {
                "title": TITLE_WEIGHT,
                "tags": TAGS_WEIGHT,
                "decision": BODY_WEIGHT,
                "reasoning": BODY_WEIGHT,
                "alternatives": BODY_WEIGHT,
            }
        ),
        DocumentType.PATTERN: MappingProxyType(
            {
                "description": TITLE_WEIGHT,
                "tags": TAGS_WEIGHT,
                "error_pattern": BODY_WEIGHT,
                "solution": BODY_WEIGHT,
                "context": BODY_WEIGHT,
            }
        ),
        DocumentType.RULE: MappingProxyType(
            {
                "rule": TITLE_WEIGHT,
                "category": TAGS_WEIGHT,
                "tags": TAGS_WEIGHT,
                "key": BODY_WEIGHT,
            }
        ),
    }
)


def weights_for(
    doc_type: DocumentType, table: FieldWeights = FIELD_WEIGHTS
) -> Mapping[str, int]:
    """Field weights for a document type; empty for unmapped types."""
    return table.get(doc_type, MappingProxyType({}))
