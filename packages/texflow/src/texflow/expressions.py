"""
Expression templates — a data-only replacement for code-valued templates.

An expression template is ordinary template text with ``{{ expr }}``
interpolations. Expressions may use:

- integer literals and double-quoted strings
- capture references ``[[n]]`` (``[[0]]`` is the whole match)
- ``+ - * // %`` and parentheses (``+`` concatenates when either side is text)
- a fixed set of builtins: ``int``, ``str``, ``upper``, ``lower``,
  ``repeat(text, n, sep)``, ``identity(n)``, ``zeros(rows, cols)``

Interpolated values are escaped before field parsing, so tab stops can only
come from the literal part of the template. Counts are capped at
``MAX_REPEAT`` and every produced string at ``MAX_OUTPUT`` characters.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Sequence, Union

from .template import escape_field_syntax
from .types import FunctionTemplate

MAX_REPEAT = 64
MAX_OUTPUT = 65536

_INTERPOLATION_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<int>\d+)
      | (?P<str>"(?:[^"\\]|\\.)*")
      | (?P<cap>\[\[\d+\]\])
      | (?P<name>[A-Za-z_]\w*)
      | (?P<op>//|[-+*%(),])
    )""",
    re.VERBOSE,
)

Value = Union[int, str]


class ExpressionError(ValueError):
    """Raised for malformed expression templates or failed evaluation."""


# ─── AST ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class _Literal:
    value: Value


@dataclass(frozen=True)
class _Capture:
    index: int


@dataclass(frozen=True)
class _Unary:
    operand: "_Node"


@dataclass(frozen=True)
class _Binary:
    op: str
    left: "_Node"
    right: "_Node"


@dataclass(frozen=True)
class _Call:
    name: str
    args: tuple["_Node", ...]


_Node = Union[_Literal, _Capture, _Unary, _Binary, _Call]


# ─── Builtins ─────────────────────────────────────────────────────────────────

def _to_int(value: Value) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(value.strip())
    except ValueError:
        raise ExpressionError(f"expected an integer, got {value!r}") from None


def _bounded(n: int) -> int:
    if n < 0 or n > MAX_REPEAT:
        raise ExpressionError(f"count {n} outside 0..{MAX_REPEAT}")
    return n


def _check_length(size: int) -> None:
    if size > MAX_OUTPUT:
        raise ExpressionError(f"result of {size} characters exceeds {MAX_OUTPUT}")


def _repeat(text: Value, n: Value, sep: Value = "") -> str:
    text, sep, count = str(text), str(sep), _bounded(_to_int(n))
    _check_length(len(text) * count + len(sep) * max(count - 1, 0))
    return sep.join([text] * count)


def _matrix_rows(rows: int, cols: int, cell: Callable[[int, int], int]) -> str:
    lines = [" & ".join(str(cell(r, c)) for c in range(cols)) for r in range(rows)]
    result = " \\\\\n".join(lines)
    _check_length(len(result))
    return result


def _identity(n: Value) -> str:
    size = _bounded(_to_int(n))
    return _matrix_rows(size, size, lambda r, c: 1 if r == c else 0)


def _zeros(rows: Value, cols: Value) -> str:
    return _matrix_rows(_bounded(_to_int(rows)), _bounded(_to_int(cols)), lambda r, c: 0)


# name -> (callable, min args, max args)
BUILTINS: dict[str, tuple[Callable[..., Value], int, int]] = {
    "int": (_to_int, 1, 1),
    "str": (str, 1, 1),
    "upper": (lambda s: str(s).upper(), 1, 1),
    "lower": (lambda s: str(s).lower(), 1, 1),
    "repeat": (_repeat, 2, 3),
    "identity": (_identity, 1, 1),
    "zeros": (_zeros, 2, 2),
}


# ─── Parser ───────────────────────────────────────────────────────────────────

def _tokenize(source: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    while pos < len(source):
        if source[pos:].strip() == "":
            break
        m = _TOKEN_RE.match(source, pos)
        if not m:
            raise ExpressionError(f"unexpected character {source[pos:].lstrip()[:1]!r} in {source!r}")
        kind = m.lastgroup or ""
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, source: str) -> None:
        self._source = source
        self._tokens = _tokenize(source)
        self._pos = 0

    def parse(self) -> _Node:
        if not self._tokens:
            raise ExpressionError("empty expression")
        node = self._expr()
        if self._pos != len(self._tokens):
            raise ExpressionError(f"unexpected {self._tokens[self._pos][1]!r} in {self._source!r}")
        return node

    def _peek(self) -> tuple[str, str] | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _take(self, text: str | None = None) -> tuple[str, str]:
        tok = self._peek()
        if tok is None:
            raise ExpressionError(f"unexpected end of {self._source!r}")
        if text is not None and tok[1] != text:
            raise ExpressionError(f"expected {text!r}, got {tok[1]!r} in {self._source!r}")
        self._pos += 1
        return tok

    def _expr(self) -> _Node:
        node = self._term()
        while (tok := self._peek()) and tok[1] in ("+", "-"):
            self._take()
            node = _Binary(tok[1], node, self._term())
        return node

    def _term(self) -> _Node:
        node = self._unary()
        while (tok := self._peek()) and tok[1] in ("*", "//", "%"):
            self._take()
            node = _Binary(tok[1], node, self._unary())
        return node

    def _unary(self) -> _Node:
        tok = self._peek()
        if tok and tok[1] == "-":
            self._take()
            return _Unary(self._unary())
        return self._primary()

    def _primary(self) -> _Node:
        kind, text = self._take()
        if kind == "int":
            return _Literal(int(text))
        if kind == "str":
            return _Literal(re.sub(r"\\(.)", r"\1", text[1:-1]))
        if kind == "cap":
            return _Capture(int(text[2:-2]))
        if kind == "name":
            return self._call(text)
        if text == "(":
            node = self._expr()
            self._take(")")
            return node
        raise ExpressionError(f"unexpected {text!r} in {self._source!r}")

    def _call(self, name: str) -> _Node:
        if name not in BUILTINS:
            raise ExpressionError(f"unknown function {name!r}")
        self._take("(")
        args: list[_Node] = []
        tok = self._peek()
        if tok and tok[1] != ")":
            args.append(self._expr())
            while (tok := self._peek()) and tok[1] == ",":
                self._take()
                args.append(self._expr())
        self._take(")")
        _, lo, hi = BUILTINS[name]
        if not lo <= len(args) <= hi:
            raise ExpressionError(f"{name}() takes {lo}..{hi} arguments, got {len(args)}")
        return _Call(name, tuple(args))


def parse_expression(source: str) -> _Node:
    return _Parser(source).parse()


# ─── Evaluation ───────────────────────────────────────────────────────────────

def evaluate(node: _Node, captures: Sequence[str | None]) -> Value:
    if isinstance(node, _Literal):
        return node.value
    if isinstance(node, _Capture):
        if node.index < len(captures) and captures[node.index] is not None:
            return captures[node.index]  # type: ignore[return-value]
        return ""
    if isinstance(node, _Unary):
        return -_to_int(evaluate(node.operand, captures))
    if isinstance(node, _Call):
        fn = BUILTINS[node.name][0]
        return fn(*(evaluate(arg, captures) for arg in node.args))

    left = evaluate(node.left, captures)
    right = evaluate(node.right, captures)
    if node.op == "+":
        if isinstance(left, int) and isinstance(right, int):
            return left + right
        left, right = str(left), str(right)
        _check_length(len(left) + len(right))
        return left + right
    a, b = _to_int(left), _to_int(right)
    if node.op == "-":
        return a - b
    if node.op == "*":
        return a * b
    if b == 0:
        raise ExpressionError("division by zero")
    return a // b if node.op == "//" else a % b


# ─── Expression templates ─────────────────────────────────────────────────────

def compile_expression_template(source: str) -> FunctionTemplate:
    """Parse ``source`` eagerly and return a template function bound to it."""
    segments: list[str | _Node] = []
    pos = 0
    for m in _INTERPOLATION_RE.finditer(source):
        segments.append(source[pos:m.start()])
        segments.append(parse_expression(m.group(1)))
        pos = m.end()
    segments.append(source[pos:])

    def render(captures: list[str | None]) -> str:
        parts: list[str] = []
        for seg in segments:
            if isinstance(seg, str):
                parts.append(seg)
            else:
                parts.append(escape_field_syntax(str(evaluate(seg, captures))))
        _check_length(sum(len(part) for part in parts))
        return "".join(parts)

    return FunctionTemplate(render, source=source)
