"""
Default LaTeX snippet table.

Fields follow the exit-last numbering: ``$1``, ``$2``, ... are visited in
order and ``$0`` marks where the caret leaves the snippet. ``${GREEK}``,
``${SYMBOL}`` and ``${MORE_SYMBOLS}`` in pattern sources are expanded
before the rules are built, so every stored pattern is self-contained.
"""
from __future__ import annotations

import re

from .expressions import compile_expression_template
from .types import Rule

SNIPPET_VARIABLES: dict[str, str] = {
    "GREEK": (
        "alpha|beta|gamma|Gamma|delta|Delta|epsilon|varepsilon|zeta|eta|theta|Theta|vartheta|"
        "iota|kappa|lambda|Lambda|mu|nu|xi|Xi|pi|Pi|rho|varrho|sigma|Sigma|tau|upsilon|Upsilon|"
        "phi|Phi|varphi|chi|psi|Psi|omega|Omega"
    ),
    "SYMBOL": (
        "infty|nabla|partial|dots|cdot|times|leftrightarrow|mapsto|setminus|mid|cap|cup|land|lor|"
        "subseteq|subset|implies|impliedby|iff|exists|forall|equiv|cong|simeq|approx|sim|propto|le|ge"
    ),
    "MORE_SYMBOLS": "int|sum|prod|lim",
}


def expand_snippet_variables(source: str, variables: dict[str, str] | None = None) -> str:
    """Replace every ``${NAME}`` with its alternation text."""
    for name, value in (SNIPPET_VARIABLES if variables is None else variables).items():
        source = source.replace(f"${{{name}}}", value)
    return source


def _pattern(source: str) -> re.Pattern[str]:
    return re.compile(expand_snippet_variables(source))


_r = Rule.create

DEFAULT_RULES: list[Rule] = [
    _r("binom", r"\binom{$1}{$2}$0", "mA"),
    _r("R", r"\textcolor{red}{${VISUAL}}$0", "mA", description="color red"),
    _r("Y", r"\bbox[lightyellow]{${VISUAL}}$0", "mA", description="highlight bg"),
    _r("C", r"\textcolor{$1}{${VISUAL}}$0", "mA", description="color by name around the selection"),

    # Math mode
    _r("mk", "$$0$", "tA"),
    _r("dm", "$$\n$0\n$$", "tAw"),
    _r("beg", "\\begin{$1}\n$2\n\\end{$1}", "mA"),

    # Greek letters
    _r("@a", r"\alpha", "mA"),
    _r("@b", r"\beta", "mA"),
    _r("@g", r"\gamma", "mA"),
    _r("@G", r"\Gamma", "mA"),
    _r("@d", r"\delta", "mA"),
    _r("@D", r"\Delta", "mA"),
    _r("@e", r"\epsilon", "mA"),
    _r(":e", r"\varepsilon", "mA"),
    _r("@z", r"\zeta", "mA"),
    _r("@t", r"\theta", "mA"),
    _r("@T", r"\Theta", "mA"),
    _r(":t", r"\vartheta", "mA"),
    _r("@i", r"\iota", "mA"),
    _r("@k", r"\kappa", "mA"),
    _r("@l", r"\lambda", "mA"),
    _r("@L", r"\Lambda", "mA"),
    _r("@s", r"\sigma", "mA"),
    _r("@S", r"\Sigma", "mA"),
    _r("@u", r"\upsilon", "mA"),
    _r("@U", r"\Upsilon", "mA"),
    _r("@o", r"\omega", "mA"),
    _r("@O", r"\Omega", "mA"),
    _r("ome", r"\omega", "mA"),
    _r("Ome", r"\Omega", "mA"),

    # Text
    _r("text", r"\text{$1}$0", "mA"),
    _r('"', r"\text{$1}$0", "mA"),

    # Basic operations
    _r("sr", "^{2}", "mA"),
    _r("cb", "^{3}", "mA"),
    _r("rd", "^{$1}$0", "mA"),
    _r("_", "_{$1}$0", "mA"),
    _r("sts", r"_\text{$0}", "mA"),
    _r("sq", r"\sqrt{ $1 }$0", "mA"),
    _r("//", r"\frac{$1}{$2}$0", "mA"),
    _r("ee", "e^{ $1 }$0", "mA"),
    _r("invs", "^{-1}", "mA"),
    _r(r"([A-Za-z])(\d)", "[[0]]_{[[1]]}", "rmA", priority=-1, description="Auto letter subscript"),
    _r(r"(^|[^\\])(exp|log|ln)", r"[[0]]\[[1]]", "rmA"),
    _r("conj", r"^{\ast}", "mA"),
    _r("Re", r"\mathrm{Re}", "mA"),
    _r("Im", r"\mathrm{Im}", "mA"),
    _r("bf", r"\mathbf{$0}", "mA"),
    _r("rm", r"\mathrm{$1}$0", "mA"),

    # Linear algebra
    _r(r"(^|[^\\])(det)", r"[[0]]\[[1]]", "rmA"),
    _r("trace", r"\mathrm{Tr}", "mA"),

    # Accents on a preceding letter
    _r("([a-zA-Z])hat", r"\hat{[[0]]}", "rmA"),
    _r("([a-zA-Z])bar", r"\overline{[[0]]}", "rmA"),
    _r("([a-zA-Z])dot", r"\dot{[[0]]}", "rmA", priority=-1),
    _r("([a-zA-Z])ddot", r"\ddot{[[0]]}", "rmA", priority=1),
    _r("([a-zA-Z])tilde", r"\tilde{[[0]]}", "rmA"),
    _r("([a-zA-Z])und", r"\underline{[[0]]}", "rmA"),
    _r("([a-zA-Z])vec", r"\vec{[[0]]}", "rmA"),
    _r(r"([a-zA-Z]),\.", r"\mathbf{[[0]]}", "rmA"),
    _r(r"([a-zA-Z])\.,", r"\mathbf{[[0]]}", "rmA"),
    _r(_pattern(r"\\(${GREEK}),\."), r"\boldsymbol{\[[0]]}", "rmA"),
    _r(_pattern(r"\\(${GREEK})\.,"), r"\boldsymbol{\[[0]]}", "rmA"),

    _r("hat", r"\hat{$1}$0", "mA"),
    _r("bar", r"\overline{$1}$0", "mA"),
    _r("dot", r"\dot{$1}$0", "mA", priority=-1),
    _r("ddot", r"\ddot{$1}$0", "mA"),
    _r("cdot", r"\cdot", "mA"),
    _r("tilde", r"\tilde{$1}$0", "mA"),
    _r("und", r"\underline{$1}$0", "mA"),
    _r("vec", r"\vec{$1}$0", "mA"),

    # More auto letter subscript
    _r(r"([A-Za-z])_(\d\d)", "[[0]]_{[[1]]}", "rmA"),
    _r(r"\\hat\{([A-Za-z])\}(\d)", r"\hat{[[0]]}_{[[1]]}", "rmA"),
    _r(r"\\vec\{([A-Za-z])\}(\d)", r"\vec{[[0]]}_{[[1]]}", "rmA"),
    _r(r"\\mathbf\{([A-Za-z])\}(\d)", r"\mathbf{[[0]]}_{[[1]]}", "rmA"),

    _r("xnn", "x_{n}", "mA"),
    _r(r"\xii", "x_{i}", "mA", priority=1),
    _r("xjj", "x_{j}", "mA"),
    _r("xp1", "x_{n+1}", "mA"),
    _r("ynn", "y_{n}", "mA"),
    _r("yii", "y_{i}", "mA"),
    _r("yjj", "y_{j}", "mA"),

    # Symbols
    _r("ooo", r"\infty", "mA"),
    _r("sum", r"\sum", "mA"),
    _r("prod", r"\prod", "mA"),
    _r(r"\sum", r"\sum_{${1:i}=${2:1}}^{${3:N}} $0", "m"),
    _r(r"\prod", r"\prod_{${1:i}=${2:1}}^{${3:N}} $0", "m"),
    _r("lim", r"\lim_{ ${1:n} \to ${2:\infty} } $0", "mA"),
    _r("+-", r"\pm", "mA"),
    _r("-+", r"\mp", "mA"),
    _r("...", r"\dots", "mA"),
    _r("nabl", r"\nabla", "mA"),
    _r("del", r"\nabla", "mA"),
    _r("xx", r"\times", "mA"),
    _r("**", r"\cdot", "mA"),
    _r("para", r"\parallel", "mA"),

    _r("===", r"\equiv", "mA"),
    _r("!=", r"\neq", "mA"),
    _r(">=", r"\geq", "mA"),
    _r("<=", r"\leq", "mA"),
    _r(">>", r"\gg", "mA"),
    _r("<<", r"\ll", "mA"),
    _r("simm", r"\sim", "mA"),
    _r("sim=", r"\simeq", "mA"),
    _r("prop", r"\propto", "mA"),

    _r("<->", r"\leftrightarrow ", "mA"),
    _r("->", r"\to", "mA"),
    _r("!>", r"\mapsto", "mA"),
    _r("=>", r"\implies", "mA"),
    _r("=<", r"\impliedby", "mA"),

    _r("and", r"\cap", "mAw"),
    _r("orr", r"\cup", "mA"),
    _r("inn", r"\in", "mA"),
    _r("notin", r"\not\in", "mA"),
    _r("\\\\\\", r"\setminus", "mA"),
    _r("sub=", r"\subseteq", "mA"),
    _r("sup=", r"\supseteq", "mA"),
    _r("eset", r"\emptyset", "mA"),
    _r("set", r"\{ $1 \\}$0", "mAw"),
    _r(r"e\xi sts", r"\exists", "mA", priority=1),

    _r("FF", r"\mathcal{F}", "mA"),
    _r("LL", r"\mathcal{L}", "mA"),
    _r("HH", r"\mathcal{H}", "mA"),
    _r("EE", r"\mathbb{E}", "mA"),
    _r("PP", r"\mathbb{P}", "mA"),
    _r("CC", r"\mathbb{C}", "mA"),
    _r("RR", r"\mathbb{R}", "mA"),
    _r("ZZ", r"\mathbb{Z}", "mA"),
    _r("NN", r"\mathbb{N}", "mA"),

    # Backslash before Greek letters and symbols
    _r(_pattern(r"(^|[^\\])(${GREEK})"), r"[[0]]\[[1]]", "rmA", description="Add backslash before Greek letters"),
    _r(_pattern(r"(^|[^\\])(${SYMBOL})"), r"[[0]]\[[1]]", "rmA", description="Add backslash before symbols"),

    # Space and suffixes after Greek letters and symbols
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}|${MORE_SYMBOLS})([A-Za-z])"), r"\[[0]] [[1]]", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) sq"), r"\[[0]]^{2}", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) cb"), r"\[[0]]^{3}", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) rd"), r"\[[0]]^{$1}$0", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) hat"), r"\hat{\[[0]]}", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) dot"), r"\dot{\[[0]]}", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) bar"), r"\bar{\[[0]]}", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) vec"), r"\vec{\[[0]]}", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) tilde"), r"\tilde{\[[0]]}", "rmA", priority=1),
    _r(_pattern(r"\\(${GREEK}|${SYMBOL}) und"), r"\underline{\[[0]]}", "rmA", priority=1),

    # Fractions; the function-call form is declared last so it outranks the generic ones
    _r(
        r"((\d+)|(\d*)(\\)?([a-zA-Z]+)(?:_\{[^}]*\}|_[\w])?(?:\^\{[^}]*\}|\^[\w])?)/",
        r"\frac{[[0]]}{$1}$0",
        "rmA",
    ),
    _r(r"\(([^)]+)\)/", r"\frac{[[0]]}{$1}$0", "rmA"),
    _r(
        r"((?:(\d+)|(\d*)(\\)?([a-zA-Z]+)(?:_\{[^}]*\}|_[\w])?(?:\^\{[^}]*\}|\^[\w])?)\([^)]+\))/",
        r"\frac{[[0]]}{$1}$0",
        "rmA",
    ),

    # Derivatives and integrals
    _r("par", r"\frac{ \partial ${1:y} }{ \partial ${2:x} } $0", "m"),
    _r(r"pa([A-Za-z])([A-Za-z])", r"\frac{ \partial [[0]] }{ \partial [[1]] } ", "rm"),
    _r("ddt", r"\frac{d}{dt} ", "mA"),
    _r("ddx", r"\frac{d}{dx} ", "mA"),

    _r(re.compile(r"(^|[^\\])int"), r"[[0]]\int", "mA", priority=-1),
    _r(r"\int", r"\int $1 \, d${2:x} $0", "m"),
    _r("dint", r"\int_{${1:0}}^{${2:1}} $3 \, d${4:x} $0", "mA"),
    _r("oint", r"\oint", "mA"),
    _r("iint", r"\iint", "mA"),
    _r("iiint", r"\iiint", "mA"),
    _r("oinf", r"\int_{0}^{\infty} $1 \, d${2:x} $0", "mA"),
    _r("infi", r"\int_{-\infty}^{\infty} $1 \, d${2:x} $0", "mA"),

    # Trigonometry
    _r(
        r"(^|[^\\])(arcsin|sin|arccos|cos|arctan|tan|csc|sec|cot)",
        r"[[0]]\[[1]]",
        "rmA",
        description="Add backslash before trig funcs",
    ),
    _r(
        r"\\(arcsin|sin|arccos|cos|arctan|tan|csc|sec|cot)([A-Za-gi-z])",
        r"\[[0]] [[1]]",
        "rmA",
        description="Add space after trig funcs. Skips letter h to allow sinh, cosh, etc.",
    ),
    _r(
        r"\\(sinh|cosh|tanh|coth)([A-Za-z])",
        r"\[[0]] [[1]]",
        "rmA",
        description="Add space after hyperbolic trig funcs",
    ),

    # Visual operations
    _r("B", r"\boxed{ ${VISUAL} }", "mA"),
    _r("U", r"\underbrace{ ${VISUAL} }_{ $0 }", "mA"),
    _r("O", r"\overbrace{ ${VISUAL} }^{ $0 }", "mA"),
    _r("L", r"\underset{ $0 }{ ${VISUAL} }", "mA"),
    _r("X", r"\cancel{ ${VISUAL} }", "mA"),
    _r("K", r"\cancelto{ $0 }{ ${VISUAL} }", "mA"),
    _r("S", r"\sqrt{ ${VISUAL} }", "mA"),

    # Physics
    _r("kbt", "k_{B}T", "mA"),
    _r("msun", r"M_{\odot}", "mA"),

    # Quantum mechanics
    _r("dag", r"^{\dagger}", "mA"),
    _r("o+", r"\oplus ", "mA"),
    _r("otimes", r"\otimes ", "mA"),
    _r("bra", r"\bra{$1} $0", "mA"),
    _r("ket", r"\ket{$1} $0", "mA"),
    _r("brk", r"\braket{ $1 | $2 } $0", "mA"),
    _r("outer", r"\ket{${1:\psi}} \bra{${1:\psi}} $0", "mA"),

    # Chemistry
    _r("pu", r"\pu{ $0 }", "mA"),
    _r("cee", r"\ce{ $0 }", "mA"),
    _r("he4", "{}^{4}_{2}He ", "mA"),
    _r("he3", "{}^{3}_{2}He ", "mA"),
    _r("iso", "{}^{${1:4}}_{${2:2}}${3:He}", "mA"),

    # Environments
    _r("pmat", "\\begin{pmatrix}\n$0\n\\end{pmatrix}", "MA"),
    _r("bmat", "\\begin{bmatrix}\n$0\n\\end{bmatrix}", "MA"),
    _r("Bmat", "\\begin{Bmatrix}\n$0\n\\end{Bmatrix}", "MA"),
    _r("vmat", "\\begin{vmatrix}\n$0\n\\end{vmatrix}", "MA"),
    _r("Vmat", "\\begin{Vmatrix}\n$0\n\\end{Vmatrix}", "MA"),
    _r("matrix", "\\begin{matrix}\n$0\n\\end{matrix}", "MA"),

    _r("pmat", r"\begin{pmatrix}$0\end{pmatrix}", "nA"),
    _r("bmat", r"\begin{bmatrix}$0\end{bmatrix}", "nA"),
    _r("Bmat", r"\begin{Bmatrix}$0\end{Bmatrix}", "nA"),
    _r("vmat", r"\begin{vmatrix}$0\end{vmatrix}", "nA"),
    _r("Vmat", r"\begin{Vmatrix}$0\end{Vmatrix}", "nA"),
    _r("matrix", r"\begin{matrix}$0\end{matrix}", "nA"),

    _r("cases", "\\begin{cases}\n$0\n\\end{cases}", "mA"),
    _r("align", "\\begin{align}\n$0\n\\end{align}", "mA"),
    _r("array", "\\begin{array}\n$0\n\\end{array}", "mA"),

    # Brackets
    _r("avg", r"\langle $1 \rangle $0", "mA"),
    _r("iprod", r"\left\langle $1 , $2 \right\rangle $0", "mA"),
    _r("form", r"\left\langle $1 \vert $2 \right\rangle $0", "mA"),
    _r("norm", r"\lvert $1 \rvert $0", "mA", priority=1),
    _r("Norm", r"\lVert $1 \rVert $0", "mA", priority=1),
    _r("sNorm", r"\lVert $1 \rVert^2 $0", "mA", priority=1),
    _r("ceil", r"\lceil $1 \rceil $0", "mA"),
    _r("floor", r"\lfloor $1 \rfloor $0", "mA"),
    _r("abs", "|$1|$0", "mA"),
    _r("(", "(${VISUAL})", "mA"),
    _r("[", "[${VISUAL}]", "mA"),
    _r("{", "{${VISUAL}}", "mA"),
    _r("(", "($1)$0", "mA"),
    _r("{", "{$1}$0", "mA"),
    _r("[", "[$1]$0", "mA"),
    _r("lr(", r"\left( $1 \right) $0", "mA"),
    _r("lr{", r"\left\{ $1 \right\\} $0", "mA"),
    _r("lr[", r"\left[ $1 \right] $0", "mA"),
    _r("lr|", r"\left| $1 \right| $0", "mA"),
    _r("lra", r"\left< $1 \right> $0", "mA"),

    # Misc
    _r(
        "tayl",
        r"${1:f}(${2:x} + ${3:h}) = ${1:f}(${2:x}) + ${1:f}'(${2:x})${3:h}"
        r" + ${1:f}''(${2:x}) \frac{${3:h}^{2}}{2!} + \dots$0",
        "mA",
        description="Taylor expansion",
    ),
    _r(
        re.compile(r"iden(\d)"),
        compile_expression_template("\\begin{pmatrix}\n{{ identity([[1]]) }}\n\\end{pmatrix}"),
        "mA",
        description="N x N identity matrix",
    ),
]
