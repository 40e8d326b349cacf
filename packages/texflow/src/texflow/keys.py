"""
Key events and key identifiers.

Key identifiers are lowercase strings such as ``"ctrl+shift+z"``,
``"alt+up"`` or ``"tab"``; modifiers are always emitted in the order
ctrl, alt, shift, meta so each combination has exactly one spelling.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

# KeyId = str (e.g. "escape", "ctrl+z", "alt+/")
KeyId = str

MODIFIERS: tuple[str, ...] = ("ctrl", "alt", "shift", "meta")

_MODIFIER_ALIASES = {
    "control": "ctrl",
    "option": "alt",
    "cmd": "meta",
    "command": "meta",
    "super": "meta",
    "win": "meta",
}

_KEY_ALIASES = {
    "arrowup": "up",
    "arrowdown": "down",
    "arrowleft": "left",
    "arrowright": "right",
    "esc": "escape",
    "return": "enter",
    "cr": "enter",
    "bs": "backspace",
    "del": "delete",
    " ": "space",
    "spacebar": "space",
    "pageup": "pageUp",
    "pagedown": "pageDown",
    "plus": "+",
}

# Special keys
ESCAPE = "escape"
ENTER = "enter"
TAB = "tab"
SPACE = "space"
BACKSPACE = "backspace"
DELETE = "delete"


@dataclass(frozen=True)
class KeyEvent:
    """A physical key press as delivered by the UI layer."""
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False

    @property
    def name(self) -> str:
        return normalize_key_name(self.key)

    @property
    def has_command_modifier(self) -> bool:
        return self.ctrl or self.alt or self.meta

    @property
    def char(self) -> str | None:
        """The character this press types, or ``None`` for commands and special keys."""
        if self.has_command_modifier:
            return None
        if self.key == " " or self.name == SPACE:
            return " "
        return self.key if len(self.key) == 1 else None


def normalize_key_name(key: str) -> str:
    if len(key) == 1:
        return _KEY_ALIASES.get(key, key.lower() if key.isalpha() else key)
    lowered = key.lower()
    return _KEY_ALIASES.get(lowered, lowered)


def _format(key: str, mods: set[str]) -> KeyId:
    return "+".join([m for m in MODIFIERS if m in mods] + [key])


def normalize_key_id(key_id: str) -> KeyId:
    """Canonical spelling of a combination such as ``"Ctrl+Shift+Z"``."""
    raw = key_id.strip()
    if not raw:
        raise ValueError("empty key combination")
    head, _, key = raw.rpartition("+")
    if key == "":
        # combination ends with the "+" key itself
        key = "+"
        head = head[:-1] if head.endswith("+") else head
    mods: set[str] = set()
    for part in filter(None, head.split("+")):
        name = _MODIFIER_ALIASES.get(part.lower(), part.lower())
        if name not in MODIFIERS:
            raise ValueError(f"unknown modifier {part!r} in {key_id!r}")
        mods.add(name)
    return _format(normalize_key_name(key), mods)


def key_id_for(event: KeyEvent) -> KeyId:
    mods = {m for m in MODIFIERS if getattr(event, m)}
    return _format(event.name, mods)


_SEQUENCE_RE = re.compile(r"<([^<>]+)>|(.)", re.DOTALL)
_SHORT_MODIFIERS = {"c": "ctrl", "a": "alt", "m": "alt", "s": "shift", "d": "meta"}


def parse_key_sequence(text: str) -> list[KeyEvent]:
    """
    Turn ``"x//<tab><c-z>"`` notation into key events.

    ``<name>`` is a special key (``<tab>``, ``<cr>``, ``<bs>``, ``<esc>``),
    ``<c-x>``/``<a-x>``/``<s-x>``/``<d-x>`` add ctrl/alt/shift/meta and
    ``<lt>`` types a literal ``<``. Anything else is typed as-is.
    """
    events: list[KeyEvent] = []
    for m in _SEQUENCE_RE.finditer(text):
        if m.group(2) is not None:
            ch = m.group(2)
            events.append(KeyEvent("enter" if ch == "\n" else ch))
            continue
        body = m.group(1)
        if body.lower() == "lt":
            events.append(KeyEvent("<"))
            continue
        mods: set[str] = set()
        parts = body.split("-")
        key = parts[-1] or "-"
        for part in filter(None, parts[:-1]):
            if part.lower() not in _SHORT_MODIFIERS:
                raise ValueError(f"unknown modifier {part!r} in <{body}>")
            mods.add(_SHORT_MODIFIERS[part.lower()])
        name = key if len(key) == 1 else normalize_key_name(key)
        events.append(KeyEvent(name, **{m_: True for m_ in mods}))
    return events
