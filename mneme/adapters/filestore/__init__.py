"""
File Store Adapter - Read-only access to a .mneme knowledge base directory.
"""

from .loader import FileStore, load_alias_dictionary

__all__ = ["FileStore", "load_alias_dictionary"]
