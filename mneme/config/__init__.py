"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    MnemeError,
    SearchError,
    StorageError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "MnemeError",
    "SearchError",
    "ConfigurationError",
    "StorageError",
]
