"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from mneme.config.errors import ErrorCode, MnemeError

    raise MnemeError(ErrorCode.ALIAS_DICTIONARY_UNAVAILABLE, "tags.json not found")

The search engine itself never raises for data-quality problems; these
errors belong to the collaborators around it (configuration loading,
storage access, command-line argument handling).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Search errors
    SEARCH_INVALID_QUERY = "SEARCH_INVALID_QUERY"
    SEARCH_UNKNOWN_TYPE = "SEARCH_UNKNOWN_TYPE"

    # Configuration errors
    ALIAS_DICTIONARY_UNAVAILABLE = "ALIAS_DICTIONARY_UNAVAILABLE"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Storage errors
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class MnemeError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# Domain-specific exceptions for cleaner imports
class SearchError(MnemeError):
    """Search request errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.SEARCH_INVALID_QUERY,
    ) -> None:
        super().__init__(code, message, details)


class ConfigurationError(MnemeError):
    """Configuration loading errors (alias dictionary, settings)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.ALIAS_DICTIONARY_UNAVAILABLE, message, details)


class StorageError(MnemeError):
    """Knowledge base storage errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.STORAGE_READ_FAILED, message, details)
