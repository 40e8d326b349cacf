"""
Edit coordinator — keystroke handling for one editor surface.

Owns the text buffer, the current selection, the pending field queue and
the undo history. Every mutation goes through ``apply_edit`` so the field
queue is shifted, history is recorded and the selection is clamped in one
place, whichever command produced the edit.

``next_field`` (Tab by default) resolves to exactly one of, in order:

1. jump to the next pending field (consumed zero-width fields are skipped)
2. expand a manual-fire rule ending at the caret
3. insert a column separator inside a tabular environment
4. step over a closing delimiter right after the caret
5. insert one indent unit
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable

from .fields import FieldTracker
from .history import DEFAULT_COALESCE_WINDOW, HistoryEntry, HistoryStack
from .keybindings import KeybindingsManager
from .keys import BACKSPACE, DELETE, ENTER, ESCAPE, TAB, KeyEvent, parse_key_sequence
from .matcher import find_surround_rule, is_inside_math, match_trigger
from .rule_source import parse_rules
from .rules import DEFAULT_RULES
from .structure import (
    CLOSING_DELIMITERS,
    current_indent,
    current_line_before,
    enclosing_tabular,
    fraction_operand_start,
    line_bounds,
    line_index,
)
from .template import compile_template, escape_field_syntax
from .types import ExpansionResult, MatchResult, Rule, TabStop, TextTemplate

logger = logging.getLogger(__name__)

AUTO_PAIRS: dict[str, str] = {"(": ")", "{": "}", "[": "]", '"': '"', "'": "'", "$": "$"}
OVERTYPE_CHARS: frozenset[str] = frozenset({")", "]", "}", '"', "'", "$"})

FRACTION_TEMPLATE = TextTemplate(r"\frac{${VISUAL}}{$1}$0")
ROW_SEPARATOR = " \\\\"

_WORD_TAIL_RE = re.compile(r"(\s+|\w+|[^\w\s]+)\Z")


@dataclass
class EditorConfig:
    """Everything an editor needs besides its text; replaced wholesale by ``reload``."""
    rules: list[Rule] = field(default_factory=lambda: list(DEFAULT_RULES))
    keybindings: KeybindingsManager = field(default_factory=KeybindingsManager)
    force_math: bool = False
    history_window: float = DEFAULT_COALESCE_WINDOW
    indent: str = "  "
    column_separator: str = " & "
    clock: Callable[[], float] = time.monotonic


class EditCoordinator:
    def __init__(self, config: EditorConfig | None = None, text: str = "", caret: int | None = None) -> None:
        self.config = config or EditorConfig()
        self.text = text
        pos = len(text) if caret is None else caret
        self.selection = TabStop(pos, pos).clamped(len(text))
        self.fields = FieldTracker()
        self.history = HistoryStack(
            HistoryEntry(text, self.selection.end),
            window=self.config.history_window,
            clock=self.config.clock,
        )
        self._actions: dict[str, Callable[[], bool]] = {
            "undo": self.undo,
            "redo": self.redo,
            "smartFraction": self.smart_fraction,
            "moveLineUp": lambda: self.move_line(-1),
            "moveLineDown": lambda: self.move_line(1),
            "nextField": self.next_field,
            "indent": self.newline_with_indent,
            "deleteWord": self.delete_word,
            "deleteLine": self.delete_line,
        }

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def caret(self) -> int:
        return self.selection.end

    @property
    def selected_text(self) -> str:
        return self.text[self.selection.start:self.selection.end]

    @property
    def in_math(self) -> bool:
        return self.config.force_math or is_inside_math(self.text, self.selection.start)

    def select(self, start: int, end: int | None = None) -> None:
        """Move the caret (or select a range) without editing."""
        self.selection = TabStop(start, start if end is None else end).clamped(len(self.text))

    def reload(
        self,
        rules: Iterable[Rule] | None = None,
        keybindings: KeybindingsManager | None = None,
        force_math: bool | None = None,
    ) -> None:
        changes: dict[str, object] = {}
        if rules is not None:
            changes["rules"] = list(rules)
        if keybindings is not None:
            changes["keybindings"] = keybindings
        if force_math is not None:
            changes["force_math"] = force_math
        self.config = replace(self.config, **changes)

    def reload_rules_source(self, source: str) -> list[Rule]:
        """Parse ``source`` and switch to it; on ``RuleSourceError`` the current rules stay."""
        rules = parse_rules(source)
        self.reload(rules=rules)
        logger.info("Loaded %d rules", len(rules))
        return rules

    # ── Edit funnel ───────────────────────────────────────────────────────────

    def apply_edit(
        self,
        text: str,
        caret: int,
        change_start: int,
        diff: int,
        immediate: bool = True,
        selection: TabStop | None = None,
    ) -> None:
        """Shift pending fields, record history, then set text and selection."""
        caret = max(0, min(caret, len(text)))
        self.fields.shift(diff, change_start)
        self.history.push(text, caret, immediate)
        self.text = text
        self.selection = (selection or TabStop(caret, caret)).clamped(len(text))

    def _splice(
        self,
        start: int,
        end: int,
        insert: str,
        caret: int,
        selection: TabStop | None = None,
        immediate: bool = True,
    ) -> None:
        text = self.text[:start] + insert + self.text[end:]
        self.apply_edit(text, caret, start, len(insert) - (end - start), immediate, selection)

    def _apply_match(self, match: MatchResult) -> None:
        diff = len(match.text) - len(self.text)
        self.apply_edit(match.text, match.selection.end, match.end, diff, selection=match.selection)
        # a snippet without its own stops keeps the outer queue
        if match.fields:
            self.fields.set(match.fields)

    def _apply_expansion(self, start: int, end: int, expansion: ExpansionResult) -> None:
        selection = expansion.entry.offset(start)
        self._splice(start, end, expansion.text, selection.end, selection=selection)
        if expansion.remaining:
            self.fields.set([stop.offset(start) for stop in expansion.remaining])

    def handle_change(
        self,
        text: str,
        caret: int,
        change_start: int | None = None,
        inserted: bool | None = None,
    ) -> MatchResult | None:
        """
        Accept a raw edit from the UI (typing, paste, plain deletion).

        Edits that insert characters run auto-fire matching at ``caret``,
        including typing over a selection that leaves the length unchanged.
        ``inserted`` defaults to whether the text grew. Without a match the
        edit is recorded as part of the current typing burst.
        """
        diff = len(text) - len(self.text)
        if change_start is None:
            change_start = caret - diff if diff > 0 else caret
        if inserted is None:
            inserted = diff > 0
        self.fields.shift(diff, change_start)

        if inserted:
            match = match_trigger(text, caret, self.config.rules, self.config.force_math, auto_only=True)
            if match is not None:
                self.text = text
                self._apply_match(match)
                return match

        caret = max(0, min(caret, len(text)))
        self.history.push(text, caret)
        self.text = text
        self.selection = TabStop(caret, caret)
        return None

    # ── Keys ──────────────────────────────────────────────────────────────────

    def handle_key(self, event: KeyEvent) -> bool:
        """Process one key press; returns whether the key was consumed."""
        action = self.config.keybindings.action_for(event)
        if action is not None:
            self._actions[action]()
            return True

        if event.name == ESCAPE:
            self.cancel()
            return False

        char = event.char
        if char is not None:
            if self._auto_pair(char) or self._overtype(char) or self._surround(char):
                return True
            self._insert(char)
            return True

        if event.has_command_modifier:
            return False
        if event.name == BACKSPACE:
            return self._backspace()
        if event.name == DELETE:
            return self._delete_forward()
        if event.name == ENTER:
            self._insert("\n")
            return True
        if event.name == TAB:
            self._insert("\t")
            return True
        return False

    def type_text(self, text: str) -> None:
        for ch in text:
            self.handle_key(KeyEvent(ENTER if ch == "\n" else ch))

    def feed_keys(self, sequence: str) -> None:
        """Replay ``"x//<tab><c-z>"`` notation through ``handle_key``."""
        for event in parse_key_sequence(sequence):
            self.handle_key(event)

    def _insert(self, chars: str) -> None:
        start, end = self.selection.start, self.selection.end
        text = self.text[:start] + chars + self.text[end:]
        self.handle_change(text, start + len(chars), change_start=start, inserted=bool(chars))

    def _auto_pair(self, char: str) -> bool:
        close = AUTO_PAIRS.get(char)
        if close is None:
            return False
        start, end = self.selection.start, self.selection.end
        if start == end and char == close and self.text[start:start + 1] == char:
            return False
        inner = self.text[start:end]
        self._splice(start, end, char + inner + close, start + 1 + len(inner))
        return True

    def _overtype(self, char: str) -> bool:
        start = self.selection.start
        if not self.selection.is_empty or char not in OVERTYPE_CHARS:
            return False
        if self.text[start:start + 1] != char:
            return False
        self.select(start + 1)
        return True

    def _surround(self, char: str) -> bool:
        if self.selection.is_empty:
            return False
        rule = find_surround_rule(char, self.config.rules, self.in_math)
        if rule is None:
            return False
        start, end = self.selection.start, self.selection.end
        expansion = compile_template(rule.template, visual=escape_field_syntax(self.text[start:end]))
        self._apply_expansion(start, end, expansion)
        return True

    def _backspace(self) -> bool:
        start, end = self.selection.start, self.selection.end
        if start != end:
            self.handle_change(self.text[:start] + self.text[end:], start, change_start=start)
            return True
        if start == 0:
            return False
        if AUTO_PAIRS.get(self.text[start - 1]) == self.text[start:start + 1]:
            self._splice(start - 1, start + 1, "", start - 1)
            return True
        self.handle_change(self.text[:start - 1] + self.text[start:], start - 1, change_start=start - 1)
        return True

    def _delete_forward(self) -> bool:
        start, end = self.selection.start, self.selection.end
        if start != end:
            self.handle_change(self.text[:start] + self.text[end:], start, change_start=start)
            return True
        if start >= len(self.text):
            return False
        self.handle_change(self.text[:start] + self.text[start + 1:], start, change_start=start + 1)
        return True

    # ── Commands ──────────────────────────────────────────────────────────────

    def next_field(self) -> bool:
        start, end = self.selection.start, self.selection.end

        if self.fields:
            step = self.fields.advance(start, self.text)
            if isinstance(step, TabStop):
                self.selection = step.clamped(len(self.text))
                return True

        if start == end:
            match = match_trigger(
                self.text, start, self.config.rules, self.config.force_math, manual_only=True,
            )
            if match is not None:
                self._apply_match(match)
                return True

        if enclosing_tabular(self.text, start) is not None:
            sep = self.config.column_separator
            self._splice(start, end, sep, start + len(sep))
            return True

        if start == end and self.text[start:start + 1] in CLOSING_DELIMITERS:
            self.select(start + 1)
            return True

        indent = self.config.indent
        self._splice(start, end, indent, start + len(indent))
        return True

    def expand(self) -> bool:
        """Expand whichever rule (manual or auto) ends at the caret."""
        if not self.selection.is_empty:
            return False
        match = match_trigger(self.text, self.selection.start, self.config.rules, self.config.force_math)
        if match is None:
            return False
        self._apply_match(match)
        return True

    def smart_fraction(self) -> bool:
        """Wrap the selection, or the operand before the caret, in ``\\frac{..}{}``."""
        start, end = self.selection.start, self.selection.end
        if start == end:
            start = fraction_operand_start(self.text, end)
            if start == end:
                return False
        visual = escape_field_syntax(self.text[start:end])
        self._apply_expansion(start, end, compile_template(FRACTION_TEMPLATE, visual=visual))
        return True

    def move_line(self, direction: int) -> bool:
        """Swap the selected lines with the line above (``-1``) or below (``1``)."""
        start, end = self.selection.start, self.selection.end
        lines = self.text.split("\n")
        first = line_index(self.text, start)
        last = line_index(self.text, end)
        if end > start and self.text[end - 1] == "\n":
            last -= 1

        moving = lines[first:last + 1]
        if direction < 0:
            if first == 0:
                return False
            neighbour = lines[first - 1]
            lines[first - 1:last + 1] = moving + [neighbour]
            offset = -(len(neighbour) + 1)
        else:
            if last >= len(lines) - 1:
                return False
            neighbour = lines[last + 1]
            lines[first:last + 2] = [neighbour] + moving
            offset = len(neighbour) + 1

        # field offsets cannot follow a reorder
        self.fields.clear()
        self.apply_edit(
            "\n".join(lines),
            start + offset,
            0,
            0,
            selection=TabStop(start + offset, end + offset),
        )
        return True

    def delete_word(self) -> bool:
        start, end = self.selection.start, self.selection.end
        if start != end:
            self._splice(start, end, "", start)
            return True
        if start == 0:
            return False
        m = _WORD_TAIL_RE.search(self.text, 0, start)
        amount = len(m.group(0)) if m else 1
        self._splice(start - amount, start, "", start - amount)
        return True

    def delete_line(self) -> bool:
        if not self.text:
            return False
        line_start, line_end = line_bounds(self.text, self.selection.start, self.selection.end)
        if line_end < len(self.text):
            cut_start, cut_end = line_start, line_end + 1
        else:
            cut_start, cut_end = max(0, line_start - 1), line_end
        remaining = self.text[:cut_start] + self.text[cut_end:]
        caret = remaining.rfind("\n", 0, cut_start) + 1 if cut_start < line_start else cut_start
        self._splice(cut_start, cut_end, "", caret)
        return True

    def newline_with_indent(self) -> bool:
        """Break the line keeping its indent; tabular rows also get a ``\\\\`` separator."""
        start, end = self.selection.start, self.selection.end
        indent = current_indent(self.text, start)
        insert = "\n" + indent
        if enclosing_tabular(self.text, start) is not None:
            line = current_line_before(self.text, start).strip()
            if line and not line.startswith(("\\begin", "\\end")) and not line.endswith("\\"):
                insert = ROW_SEPARATOR + "\n" + indent
        self._splice(start, end, insert, start + len(insert))
        return True

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def _restore(self, entry: HistoryEntry | None) -> bool:
        if entry is None:
            return False
        self.fields.clear()
        self.text = entry.text
        self.select(entry.caret)
        return True

    def cancel(self) -> None:
        """Leave the current snippet; its remaining fields are dropped."""
        self.fields.clear()
