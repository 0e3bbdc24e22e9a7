"""
Interfaces - User-facing entry points.

- cli: Command-line interface
"""

__all__ = ["cli"]
