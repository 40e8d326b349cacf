"""
Key-value persistence for rules and keybindings.

Values are strings stored under versioned keys (see ``texflow.config``);
a format change introduces a new key rather than migrating old data.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Protocol

from .config import KEYBINDINGS_KEY, RULES_KEY, get_store_path
from .keybindings import KeybindingsManager
from .rule_source import parse_keybindings, parse_rules, serialize_keybindings, serialize_rules
from .rules import DEFAULT_RULES
from .types import Rule

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-memory store (no file I/O)."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """
    A JSON object on disk mapping keys to string values.

    The file is re-read on every access and replaced atomically on every
    write. An unreadable file is reported in ``errors`` and treated as empty.
    """

    def __init__(self, path: str | None = None) -> None:
        self.path = path or get_store_path()
        self.errors: list[str] = []

    def _load(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read %s: %s", self.path, e)
            self.errors.append(str(e))
            return {}
        if not isinstance(raw, dict):
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._write(data)

    def keys(self) -> list[str]:
        return list(self._load())


class Storage:
    """Rules and keybindings on top of a ``KeyValueStore``."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @classmethod
    def open(cls, path: str | None = None) -> "Storage":
        return cls(JsonFileStore(path))

    @classmethod
    def in_memory(cls) -> "Storage":
        return cls(MemoryStore())

    # ── Rules ─────────────────────────────────────────────────────────────────

    def load_rules_source(self) -> str | None:
        return self.store.get(RULES_KEY)

    def load_rules(self) -> list[Rule]:
        """Stored rules, or the defaults when nothing is stored; raises ``RuleSourceError`` if malformed."""
        source = self.store.get(RULES_KEY)
        if source is None:
            return list(DEFAULT_RULES)
        return parse_rules(source)

    def save_rules(self, rules: list[Rule]) -> None:
        self.store.set(RULES_KEY, serialize_rules(rules))

    def save_rules_source(self, source: str) -> list[Rule]:
        """Validate ``source`` and store it verbatim; nothing is written if it does not parse."""
        rules = parse_rules(source)
        self.store.set(RULES_KEY, source)
        return rules

    def reset_rules(self) -> None:
        self.store.delete(RULES_KEY)

    # ── Keybindings ───────────────────────────────────────────────────────────

    def load_keybindings(self) -> KeybindingsManager:
        source = self.store.get(KEYBINDINGS_KEY)
        if source is None:
            return KeybindingsManager()
        return parse_keybindings(source)

    def save_keybindings(self, manager: KeybindingsManager) -> None:
        self.store.set(KEYBINDINGS_KEY, serialize_keybindings(manager))

    def reset_keybindings(self) -> KeybindingsManager:
        self.store.delete(KEYBINDINGS_KEY)
        return KeybindingsManager()
