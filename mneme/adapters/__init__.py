"""
Adapters - External storage integrations.

Storage access is wrapped here so the search domain only ever sees
in-memory documents and an alias dictionary.
"""

from .filestore import FileStore, load_alias_dictionary

__all__ = [
    "FileStore",
    "load_alias_dictionary",
]
