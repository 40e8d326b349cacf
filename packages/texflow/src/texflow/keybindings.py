"""
Editor keybindings.

Provides the EditorAction type, DEFAULT_KEYBINDINGS and the
KeybindingsManager. Each key combination maps to exactly one action;
binding a combination again replaces its previous action.
"""
from __future__ import annotations

from typing import Iterable, Literal, get_args

from .keys import KeyEvent, KeyId, key_id_for, normalize_key_id

# ─────────────────────────────────────────────────────────────────────────────
# EditorAction type
# ─────────────────────────────────────────────────────────────────────────────

EditorAction = Literal[
    "undo",
    "redo",
    "smartFraction",
    "moveLineUp",
    "moveLineDown",
    "nextField",
    "indent",
    "deleteWord",
    "deleteLine",
]

EDITOR_ACTIONS: tuple[str, ...] = get_args(EditorAction)

# ─────────────────────────────────────────────────────────────────────────────
# Default keybindings
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_KEYBINDINGS: dict[KeyId, EditorAction] = {
    "alt+/": "smartFraction",
    "alt+up": "moveLineUp",
    "alt+down": "moveLineDown",
    "ctrl+z": "undo",
    "ctrl+shift+z": "redo",
    "ctrl+y": "redo",
    "ctrl+backspace": "deleteWord",
    "ctrl+shift+k": "deleteLine",
    "tab": "nextField",
    "enter": "indent",
}


# ─────────────────────────────────────────────────────────────────────────────
# KeybindingsManager
# ─────────────────────────────────────────────────────────────────────────────

def _check_action(action: str) -> None:
    if action not in EDITOR_ACTIONS:
        raise ValueError(f"unknown editor action {action!r}")


class KeybindingsManager:
    """Combination → action table for one editor."""

    def __init__(self, bindings: dict[str, str] | None = None) -> None:
        self._bindings: dict[KeyId, str] = {}
        for combo, action in (DEFAULT_KEYBINDINGS if bindings is None else bindings).items():
            self.bind(combo, action)

    def bind(self, combination: str, action: str) -> KeyId:
        """Bind ``combination`` to ``action``, replacing any previous action; returns the canonical key id."""
        _check_action(action)
        key_id = normalize_key_id(combination)
        self._bindings[key_id] = action
        return key_id

    def unbind(self, combination: str) -> bool:
        return self._bindings.pop(normalize_key_id(combination), None) is not None

    def action_for(self, key: KeyEvent | str) -> str | None:
        key_id = key_id_for(key) if isinstance(key, KeyEvent) else normalize_key_id(key)
        return self._bindings.get(key_id)

    def keys_for(self, action: str) -> list[KeyId]:
        """Get keys bound to an action."""
        return [k for k, a in self._bindings.items() if a == action]

    def reset(self) -> None:
        """Restore the default table."""
        self._bindings = dict(DEFAULT_KEYBINDINGS)

    def to_list(self) -> list[dict[str, str]]:
        return [{"combination": k, "action": a} for k, a in self._bindings.items()]

    @classmethod
    def from_list(cls, records: Iterable[dict[str, str]]) -> "KeybindingsManager":
        manager = cls({})
        for record in records:
            manager.bind(record["combination"], record["action"])
        return manager

    def copy(self) -> "KeybindingsManager":
        return KeybindingsManager(dict(self._bindings))

    def __len__(self) -> int:
        return len(self._bindings)
