"""
File Store - Read-only loader for a ``.mneme`` knowledge base directory.

Layout:
    tags.json                      {"tags": [{id, label, aliases}]}
    sessions/**/*.json             one session per file
    decisions/**/*.json            one decision per file
    patterns/*.json                {"patterns": [...]}
    rules/dev-rules.json           {"rules": [...]} or {"items": [...]}
    rules/review-guidelines.json   same shape as dev-rules.json

Unreadable files and invalid records are logged and skipped so that one bad
entry never hides the rest of the knowledge base.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from mneme.config.errors import ConfigurationError, StorageError
from mneme.domains.search.models import AliasDictionary, Document, DocumentType

logger = logging.getLogger(__name__)

__all__ = ["FileStore", "load_alias_dictionary"]

RULE_FILES = ("dev-rules.json", "review-guidelines.json")

_TIMESTAMP = TypeAdapter(datetime)


def load_alias_dictionary(path: str | Path) -> AliasDictionary:
    """
    Load the tag alias dictionary.

    Args:
        path: Path to tags.json

    Returns:
        Parsed alias dictionary

    Raises:
        ConfigurationError: File missing, unreadable or malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Alias dictionary not found: {path}", {"path": str(path)}
        ) from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Alias dictionary unreadable: {path}", {"path": str(path), "error": str(e)}
        ) from e

    try:
        aliases = AliasDictionary.model_validate({"tags": data.get("tags", [])})
    except (AttributeError, ValidationError) as e:
        raise ConfigurationError(
            f"Alias dictionary malformed: {path}", {"path": str(path), "error": str(e)}
        ) from e

    logger.debug("Loaded %d tags from %s", len(aliases), path)
    return aliases


def _read_json(path: Path) -> Any:
    """Parse a JSON file, returning None when it cannot be read."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Skipping unreadable file %s: %s", path, e)
        return None


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _texts(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str) and v.strip()]


def _joined(item: Any, keys: tuple[str, ...]) -> str:
    if not isinstance(item, dict):
        return ""
    return "\n".join(t for t in (_text(item.get(k)) for k in keys) if t)


def _records(items: Any) -> list[dict[str, Any]]:
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []


def _timestamp(record: dict[str, Any]) -> datetime | None:
    """Last update time, or None when absent or unparsable."""
    value = record.get("updatedAt") or record.get("createdAt")
    if not value:
        return None
    try:
        return _TIMESTAMP.validate_python(value)
    except ValidationError:
        logger.debug("Ignoring unparsable timestamp %r", value)
        return None


class FileStore:
    """
    Read-only view of a knowledge base directory.

    Example:
        >>> store = FileStore(".mneme")
        >>> aliases = store.load_aliases()
        >>> corpus = store.load_corpus()
    """

    def __init__(self, data_dir: str | Path, tags_file: str = "tags.json") -> None:
        """
        Initialize file store.

        Args:
            data_dir: Knowledge base directory
            tags_file: Alias dictionary file name inside data_dir
        """
        self.data_dir = Path(data_dir)
        self.tags_path = self.data_dir / tags_file

    def load_aliases(self) -> AliasDictionary:
        """Load the alias dictionary (fatal if missing)."""
        return load_alias_dictionary(self.tags_path)

    def load_corpus(self) -> list[Document]:
        """
        Load every valid document.

        Raises:
            StorageError: Knowledge base directory does not exist
        """
        if not self.data_dir.is_dir():
            raise StorageError(
                f"Knowledge base not found: {self.data_dir}",
                {"path": str(self.data_dir)},
            )

        corpus: list[Document] = []
        for raw in self._iter_raw():
            try:
                corpus.append(Document.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "Skipping invalid %s %r: %d errors",
                    raw["type"].value,
                    raw.get("id"),
                    e.error_count(),
                )

        logger.info("Loaded %d documents from %s", len(corpus), self.data_dir)
        return corpus

    def _iter_raw(self) -> Iterator[dict[str, Any]]:
        yield from self._sessions()
        yield from self._decisions()
        yield from self._patterns()
        yield from self._rules()

    def _json_files(self, subdir: str, recursive: bool = True) -> list[Path]:
        root = self.data_dir / subdir
        if not root.is_dir():
            return []
        pattern = "**/*.json" if recursive else "*.json"
        return sorted(p for p in root.glob(pattern) if p.is_file())

    def _sessions(self) -> Iterator[dict[str, Any]]:
        for path in self._json_files("sessions"):
            data = _read_json(path)
            if not isinstance(data, dict):
                continue
            summary = data.get("summary") if isinstance(data.get("summary"), dict) else {}

            interactions = [
                _joined(i, ("topic", "request", "problem", "choice", "reasoning"))
                for i in _records(data.get("interactions"))
            ]
            interactions += [
                _joined(d, ("topic", "decision", "reasoning"))
                for d in _records(data.get("discussions"))
            ]
            interactions += [
                _joined(e, ("error", "cause", "solution"))
                for e in _records(data.get("errors"))
            ]

            yield {
                "type": DocumentType.SESSION,
                "id": data.get("id") or path.stem,
                "title": _text(data.get("title")) or _text(summary.get("title")),
                "fields": {
                    "goal": _text(data.get("goal")) or _text(summary.get("goal")),
                    "description": _text(summary.get("description")),
                    "tags": _texts(data.get("tags")),
                    "interactions": [t for t in interactions if t],
                },
                "recency": _timestamp(data),
            }

    def _decisions(self) -> Iterator[dict[str, Any]]:
        for path in self._json_files("decisions"):
            data = _read_json(path)
            if not isinstance(data, dict):
                continue
            alternatives = [
                ": ".join(t for t in (_text(a.get("name")), _text(a.get("reason"))) if t)
                for a in _records(data.get("alternatives"))
            ]
            yield {
                "type": DocumentType.DECISION,
                "id": data.get("id") or path.stem,
                "title": _text(data.get("title")),
                "fields": {
                    "decision": _text(data.get("decision")),
                    "reasoning": _text(data.get("reasoning")),
                    "alternatives": [t for t in alternatives if t],
                    "tags": _texts(data.get("tags")),
                    "status": _text(data.get("status")),
                    "priority": _text(data.get("priority")),
                },
                "recency": _timestamp(data),
            }

    def _patterns(self) -> Iterator[dict[str, Any]]:
        for path in self._json_files("patterns", recursive=False):
            data = _read_json(path)
            if not isinstance(data, dict):
                continue
            for index, item in enumerate(_records(data.get("patterns"))):
                description = _text(item.get("description"))
                pattern_id = item.get("id") or f"{path.stem}-{item.get('type') or 'unknown'}-{index}"
                yield {
                    "type": DocumentType.PATTERN,
                    "id": pattern_id,
                    "title": description,
                    "fields": {
                        "description": description,
                        "error_pattern": _text(item.get("errorPattern")),
                        "solution": _text(item.get("solution")),
                        "context": _text(item.get("context")),
                        "tags": _texts(item.get("tags")),
                        "status": _text(item.get("status")),
                        "priority": _text(item.get("priority")),
                    },
                    "recency": _timestamp(item),
                }

    def _rules(self) -> Iterator[dict[str, Any]]:
        rules_dir = self.data_dir / "rules"
        for name in RULE_FILES:
            path = rules_dir / name
            if not path.is_file():
                continue
            data = _read_json(path)
            if not isinstance(data, dict):
                continue
            for item in _records(data.get("items") or data.get("rules")):
                if item.get("enabled") is False:
                    continue
                text = _text(item.get("rule")) or _text(item.get("text")) or _text(item.get("key"))
                yield {
                    "type": DocumentType.RULE,
                    "id": item.get("id") or item.get("key") or "",
                    "title": text,
                    "fields": {
                        "rule": text,
                        "category": _text(item.get("category")),
                        "key": _text(item.get("key")),
                        "tags": _texts(item.get("tags")),
                        "status": _text(item.get("status")),
                        "priority": _text(item.get("priority")),
                    },
                    "recency": _timestamp(item),
                }
