"""
Template compiler.

Turns a replacement template into clean text plus field ranges:

- ``${VISUAL}`` is replaced by the selected text (surround rules)
- ``[[n]]`` is replaced by capture ``n``
- ``$n`` marks a zero-width field, ``${n:default}`` a field selecting ``default``
- ``\\$``, ``\\}`` and ``\\\\`` escape the following character; any other
  backslash is kept, so LaTeX commands such as ``\\alpha`` pass through

Fields are visited in ascending id order with ``0`` last (the exit point).
"""
from __future__ import annotations

import logging
import re
from typing import Sequence

from .types import VISUAL_PLACEHOLDER, ExpansionResult, FunctionTemplate, TabStop, Template, TextTemplate

logger = logging.getLogger(__name__)

ERROR_MARKER = "ERROR"

_PLACEHOLDER_RE = re.compile(re.escape(VISUAL_PLACEHOLDER) + r"|\[\[(\d+)\]\]")
_FIELD_OPEN_RE = re.compile(r"\$\{(\d):")
_ESCAPABLE = ("$", "}", "\\")


def escape_field_syntax(text: str) -> str:
    """Escape ``text`` so the field scanner reproduces it literally."""
    return text.replace("\\", "\\\\").replace("$", "\\$").replace("}", "\\}")


def substitute_placeholders(text: str, captures: Sequence[str | None], visual: str = "") -> str:
    """Replace ``${VISUAL}`` and ``[[n]]`` in one pass (values are never re-scanned)."""
    def _replace(m: re.Match[str]) -> str:
        if m.group(1) is None:
            return visual
        idx = int(m.group(1))
        if idx < len(captures) and captures[idx] is not None:
            return captures[idx]  # type: ignore[return-value]
        return ""

    return _PLACEHOLDER_RE.sub(_replace, text)


def _render_raw(template: Template, captures: Sequence[str | None], visual: str) -> str:
    if isinstance(template, FunctionTemplate):
        try:
            result = template.fn(list(captures))
        except Exception:
            logger.exception("Function template failed for captures %r", list(captures))
            return ERROR_MARKER
        if not isinstance(result, str):
            logger.warning("Function template returned %s instead of str", type(result).__name__)
            return ERROR_MARKER
        return result
    if isinstance(template, TextTemplate):
        return substitute_placeholders(template.text, captures, visual)
    raise TypeError(f"unsupported template type: {type(template).__name__}")


def _scan_default(raw: str, i: int) -> tuple[str, int] | None:
    """Read a field default starting at ``i``; return (content, index after ``}``) or None if unterminated."""
    out: list[str] = []
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch == "\\" and i + 1 < n and raw[i + 1] in _ESCAPABLE:
            out.append(raw[i + 1])
            i += 2
            continue
        if ch == "}":
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    return None


def parse_fields(raw: str) -> tuple[str, dict[int, TabStop]]:
    """Strip field syntax from ``raw``; return clean text and the first range seen for each id."""
    out: list[str] = []
    length = 0
    fields: dict[int, TabStop] = {}
    i = 0
    n = len(raw)

    while i < n:
        ch = raw[i]

        if ch == "\\":
            nxt = raw[i + 1] if i + 1 < n else ""
            if nxt in _ESCAPABLE:
                out.append(nxt)
                length += 1
                i += 2
            else:
                out.append(ch)
                length += 1
                i += 1
            continue

        if ch == "$" and i + 1 < n:
            m = _FIELD_OPEN_RE.match(raw, i)
            if m:
                scanned = _scan_default(raw, m.end())
                if scanned is not None:
                    content, after = scanned
                    field_id = int(m.group(1))
                    start = length
                    out.append(content)
                    length += len(content)
                    # later occurrences are frozen copies of the default
                    fields.setdefault(field_id, TabStop(start, length))
                    i = after
                    continue
            elif raw[i + 1].isdigit() and raw[i + 1].isascii():
                fields.setdefault(int(raw[i + 1]), TabStop(length, length))
                i += 2
                continue

        out.append(ch)
        length += 1
        i += 1

    return "".join(out), fields


def order_fields(fields: dict[int, TabStop], text_length: int) -> tuple[TabStop, list[TabStop]]:
    """Split fields into the entry stop and the queue that follows it."""
    end = TabStop(text_length, text_length)
    sequence = sorted(fid for fid in fields if fid != 0)

    if not sequence:
        return fields.get(0, end), []

    entry = fields[sequence[0]]
    remaining = [fields[fid] for fid in sequence[1:]]
    remaining.append(fields.get(0, end))
    return entry, remaining


def compile_template(
    template: Template,
    captures: Sequence[str | None] = (),
    visual: str = "",
) -> ExpansionResult:
    """Expand ``template`` against ``captures`` and the visual selection."""
    raw = _render_raw(template, captures, visual)
    text, fields = parse_fields(raw)
    entry, remaining = order_fields(fields, len(text))
    return ExpansionResult(text=text, entry=entry, remaining=remaining, fields=fields)
