"""
Character-scanning helpers over raw LaTeX text.

These are heuristics, not a parser: environments are found by matching
``\\begin{..}``/``\\end{..}`` tags and operands by scanning backward over
brackets and word characters.
"""
from __future__ import annotations

import re

TABULAR_ENVIRONMENTS: frozenset[str] = frozenset({
    "pmatrix", "bmatrix", "Bmatrix", "vmatrix", "Vmatrix", "matrix",
    "cases", "align", "align*", "array", "gather", "gather*", "split",
})

_ENV_TAG_RE = re.compile(r"\\(begin|end)\{([a-zA-Z0-9*]+)\}")

CLOSING_DELIMITERS: frozenset[str] = frozenset({"}", "]", ")", "$", ">", '"', "'"})

_BRACKET_PAIRS = {")": "(", "}": "{", "]": "["}

# commands that act as operators or relations and end a fraction operand
HARD_STOP_COMMANDS: frozenset[str] = frozenset({
    "cdot", "times", "div", "pm", "mp", "ast", "star", "circ", "bullet",
    "oplus", "otimes", "cap", "cup", "setminus", "land", "lor", "wedge", "vee",
    "le", "leq", "ge", "geq", "neq", "ne", "ll", "gg", "equiv", "approx", "sim",
    "simeq", "cong", "propto", "in", "notin", "ni", "subset", "subseteq",
    "supset", "supseteq", "to", "mapsto", "implies", "impliedby", "iff",
    "leftrightarrow", "rightarrow", "leftarrow", "Rightarrow", "Leftarrow",
    "mid", "parallel", "perp", "quad", "qquad",
})


def enclosing_tabular(text: str, caret: int) -> str | None:
    """Name of the innermost unclosed environment before ``caret`` if it is tabular."""
    tags = list(_ENV_TAG_RE.finditer(text, 0, caret))
    stack: list[str] = []
    for m in reversed(tags):
        kind, env = m.group(1), m.group(2)
        if kind == "end":
            stack.append(env)
        elif stack and stack[-1] == env:
            stack.pop()
        else:
            return env if env in TABULAR_ENVIRONMENTS else None
    return None


def tabular_end(text: str, caret: int, env: str) -> int | None:
    """Absolute offset of the ``\\end{env}`` tag following ``caret``."""
    idx = text.find(f"\\end{{{env}}}", caret)
    return idx if idx != -1 else None


def _matching_opener(text: str, close_idx: int) -> int | None:
    close = text[close_idx]
    open_ = _BRACKET_PAIRS[close]
    balance = 1
    i = close_idx - 1
    while i >= 0:
        if text[i] == close:
            balance += 1
        elif text[i] == open_:
            balance -= 1
            if balance == 0:
                return i
        i -= 1
    return None


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_^'."


def fraction_operand_start(text: str, caret: int) -> int:
    """
    Start of the operand that ends at ``caret``.

    Bracket groups, word runs and ``\\commands`` chain into one operand
    (``x^{2}``, ``\\sin(x)``, ``\\frac{a}{b}``). Whitespace, operator
    characters, unbalanced openers and relation commands stop the scan.
    Returns ``caret`` when there is no operand.
    """
    i = caret
    while i > 0:
        ch = text[i - 1]
        if ch in _BRACKET_PAIRS:
            opener = _matching_opener(text, i - 1)
            if opener is None:
                break
            i = opener
            continue
        if ch.isalpha():
            j = i
            while j > 0 and text[j - 1].isalpha():
                j -= 1
            if j > 0 and text[j - 1] == "\\":
                if text[j:i] in HARD_STOP_COMMANDS:
                    break
                i = j - 1
                continue
            i = j
            continue
        if _is_word_char(ch):
            i -= 1
            continue
        # whitespace, operators, unbalanced openers, stray backslashes
        break
    return i


def line_bounds(text: str, start: int, end: int) -> tuple[int, int]:
    """Offsets of the first line start and the last line end covering ``[start, end]``."""
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    return line_start, len(text) if line_end == -1 else line_end


def line_index(text: str, offset: int) -> int:
    return text.count("\n", 0, offset)


def current_indent(text: str, caret: int) -> str:
    """Leading whitespace of the line containing ``caret`` (up to the caret)."""
    line_start = text.rfind("\n", 0, caret) + 1
    line = text[line_start:caret]
    return line[: len(line) - len(line.lstrip(" \t"))]


def current_line_before(text: str, caret: int) -> str:
    return text[text.rfind("\n", 0, caret) + 1:caret]
