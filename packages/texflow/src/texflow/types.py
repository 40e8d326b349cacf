"""
Core type definitions for the snippet engine.

Triggers and templates are tagged variants so the matcher and the compiler
dispatch on type instead of probing values.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Union

# ─── Ranges ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TabStop:
    """Half-open ``[start, end)`` character range. ``start == end`` is a caret position."""
    start: int
    end: int

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def shifted(self, diff: int) -> "TabStop":
        return TabStop(self.start + diff, self.end + diff)

    def offset(self, base: int) -> "TabStop":
        return self.shifted(base)

    def clamped(self, length: int) -> "TabStop":
        start = max(0, min(self.start, length))
        end = max(start, min(self.end, length))
        return TabStop(start, end)


# ─── Triggers ─────────────────────────────────────────────────────────────────

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    # global / unicode / sticky have no meaning for an end-anchored search
    "g": 0,
    "u": 0,
    "y": 0,
}


@dataclass(frozen=True)
class LiteralTrigger:
    text: str

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class PatternTrigger:
    source: str
    flags: str = ""
    _compiled: list[re.Pattern[str]] = field(default_factory=list, init=False, repr=False, compare=False)

    @property
    def length(self) -> int:
        return 0

    def regex_flags(self) -> int:
        value = 0
        for letter in self.flags:
            if letter not in _REGEX_FLAGS:
                raise re.error(f"unsupported regex flag {letter!r}")
            value |= _REGEX_FLAGS[letter]
        return value

    def compile(self) -> re.Pattern[str]:
        """Compile the pattern anchored to the end of the searched text (cached)."""
        if not self._compiled:
            self._compiled.append(re.compile(f"(?:{self.source})\\Z", self.regex_flags()))
        return self._compiled[0]

    @classmethod
    def from_regex(cls, pattern: re.Pattern[str]) -> "PatternTrigger":
        letters = ""
        if pattern.flags & re.IGNORECASE:
            letters += "i"
        if pattern.flags & re.MULTILINE:
            letters += "m"
        if pattern.flags & re.DOTALL:
            letters += "s"
        return cls(pattern.pattern, letters)


Trigger = Union[LiteralTrigger, PatternTrigger]


# ─── Templates ────────────────────────────────────────────────────────────────

VISUAL_PLACEHOLDER = "${VISUAL}"


@dataclass(frozen=True)
class TextTemplate:
    text: str

    @property
    def uses_visual(self) -> bool:
        return VISUAL_PLACEHOLDER in self.text


@dataclass(frozen=True)
class FunctionTemplate:
    """
    Template computed from the capture list.

    ``source`` is the expression-template text when the function was built by
    ``texflow.expressions``; plain Python callables leave it as ``None`` and
    cannot be serialized.
    """
    fn: Callable[[list[str | None]], Any]
    source: str | None = None

    @property
    def uses_visual(self) -> bool:
        return False


Template = Union[TextTemplate, FunctionTemplate]


# ─── Rule flags ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RuleFlags:
    math_only: bool = False
    text_only: bool = False
    auto_fire: bool = False
    regex: bool = False
    word_boundary: bool = False
    multi_line: bool = False

    @classmethod
    def parse(cls, options: str) -> "RuleFlags":
        return cls(
            math_only="m" in options,
            text_only="t" in options or "n" in options,
            auto_fire="A" in options,
            regex="r" in options,
            word_boundary="w" in options,
            multi_line="M" in options,
        )

    def allows_mode(self, in_math: bool) -> bool:
        if self.math_only and not in_math:
            return False
        if self.text_only and in_math:
            return False
        return True


# ─── Rule ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Rule:
    trigger: Trigger
    template: Template
    options: str = ""
    priority: int = 0
    description: str = ""

    @property
    def flags(self) -> RuleFlags:
        return RuleFlags.parse(self.options)

    @property
    def uses_visual(self) -> bool:
        return self.template.uses_visual

    @classmethod
    def create(
        cls,
        trigger: "str | re.Pattern[str] | Trigger",
        template: "str | Callable[[list[str | None]], Any] | Template",
        options: str = "",
        priority: int = 0,
        description: str = "",
    ) -> "Rule":
        """Build a rule from loose values; a string trigger becomes a pattern under the ``r`` flag."""
        if isinstance(trigger, (LiteralTrigger, PatternTrigger)):
            trig: Trigger = trigger
        elif isinstance(trigger, re.Pattern):
            trig = PatternTrigger.from_regex(trigger)
        elif "r" in options:
            trig = PatternTrigger(trigger)
        else:
            trig = LiteralTrigger(trigger)

        if isinstance(template, (TextTemplate, FunctionTemplate)):
            tmpl: Template = template
        elif isinstance(template, str):
            tmpl = TextTemplate(template)
        else:
            tmpl = FunctionTemplate(template)

        return cls(trig, tmpl, options, priority, description)


# ─── Engine results ───────────────────────────────────────────────────────────

@dataclass
class ExpansionResult:
    """Clean template output; offsets are relative to ``text``."""
    text: str
    entry: TabStop
    remaining: list[TabStop] = field(default_factory=list)
    fields: dict[int, TabStop] = field(default_factory=dict)


@dataclass
class MatchResult:
    """A fired rule; offsets are absolute positions in ``text``."""
    text: str
    selection: TabStop
    fields: list[TabStop]
    rule: Rule
    start: int
    end: int
