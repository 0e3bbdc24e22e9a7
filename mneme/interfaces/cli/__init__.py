"""
CLI Interface - Command-line tools for mneme.

Provides commands for:
- Interactive search
- Alias expansion preview
- Automatic context injection
"""

from .main import app, main

__all__ = ["app", "main"]
