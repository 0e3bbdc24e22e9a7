"""
mneme - Fuzzy, alias-aware search over a project's working memory.

Example:
    >>> from mneme.domains.search import FuzzySearchEngine
    >>> engine = FuzzySearchEngine(aliases)
    >>> results = engine.search("auth", corpus)
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
