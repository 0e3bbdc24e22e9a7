"""
Domains - Business logic layer.

Each domain is self-contained with:
- models.py: Pydantic data models
- contracts.py: Interfaces (Protocol classes), where needed
- Implementation files
- test_*.py modules beside the code
"""

__all__ = [
    "search",
    "injection",
]
