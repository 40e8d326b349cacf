"""Tests for texflow.structure — environment and operand scanning"""
from texflow.structure import (
    current_indent,
    current_line_before,
    enclosing_tabular,
    fraction_operand_start,
    line_bounds,
    line_index,
    tabular_end,
)

MATRIX = "\\begin{pmatrix}\na\n\\end{pmatrix}"
CELL = MATRIX.index("\na") + 1


class TestEnclosingTabular:
    def test_inside_matrix(self):
        assert enclosing_tabular(MATRIX, CELL + 1) == "pmatrix"

    def test_after_end(self):
        assert enclosing_tabular(MATRIX, len(MATRIX)) is None

    def test_innermost_wins(self):
        text = "\\begin{equation}\\begin{cases} x"
        assert enclosing_tabular(text, len(text)) == "cases"

    def test_innermost_non_tabular(self):
        text = "\\begin{cases}\\begin{equation} x"
        assert enclosing_tabular(text, len(text)) is None

    def test_closed_inner_environment_skipped(self):
        text = "\\begin{pmatrix} \\begin{cases} a \\end{cases} b"
        assert enclosing_tabular(text, len(text)) == "pmatrix"

    def test_plain_text(self):
        assert enclosing_tabular("x + y", 3) is None

    def test_tabular_end(self):
        caret = CELL
        assert tabular_end(MATRIX, caret, "pmatrix") == MATRIX.index("\\end")
        assert tabular_end(MATRIX, caret, "bmatrix") is None


class TestFractionOperand:
    def test_superscript_group(self):
        text = "1 + x^{2}"
        assert fraction_operand_start(text, len(text)) == 4

    def test_function_call(self):
        assert fraction_operand_start("\\sin(x)", 7) == 0

    def test_command_with_groups(self):
        text = "a + \\frac{a}{b}"
        assert fraction_operand_start(text, len(text)) == 4

    def test_relation_command_stops(self):
        assert fraction_operand_start("a\\leq{b}", 8) == 5

    def test_parenthesised(self):
        assert fraction_operand_start("(a+b)", 5) == 0

    def test_unbalanced_opener_stops(self):
        assert fraction_operand_start("a+(b", 4) == 3

    def test_number_and_letter(self):
        assert fraction_operand_start("2x", 2) == 0

    def test_prime(self):
        assert fraction_operand_start("f'", 2) == 0

    def test_no_operand(self):
        assert fraction_operand_start("x ", 2) == 2
        assert fraction_operand_start("", 0) == 0


class TestLines:
    def test_line_bounds(self):
        assert line_bounds("ab\ncd\nef", 4, 4) == (3, 5)
        assert line_bounds("ab\ncd\nef", 1, 7) == (0, 8)

    def test_line_index(self):
        assert line_index("ab\ncd\nef", 0) == 0
        assert line_index("ab\ncd\nef", 7) == 2

    def test_current_indent(self):
        assert current_indent("  x\n    y", 9) == "    "
        assert current_indent("\tx", 2) == "\t"
        assert current_indent("x", 1) == ""

    def test_current_line_before(self):
        assert current_line_before("ab\ncd", 4) == "c"
