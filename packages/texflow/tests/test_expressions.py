"""Tests for texflow.expressions — the data-only template language"""
import pytest

from texflow.expressions import (
    MAX_OUTPUT,
    ExpressionError,
    compile_expression_template,
    evaluate,
    parse_expression,
)
from texflow.template import ERROR_MARKER, compile_template
from texflow.types import TabStop


def render(source, captures=()):
    return compile_template(compile_expression_template(source), list(captures)).text


class TestArithmetic:
    def test_precedence(self):
        assert render("{{ 2 + 3 * 4 }}") == "14"
        assert render("{{ (2 + 3) * 4 }}") == "20"

    def test_unary_minus(self):
        assert render("{{ -3 + 5 }}") == "2"

    def test_floor_division_and_modulo(self):
        assert render("{{ 7 // 2 }}{{ 7 % 2 }}") == "31"

    def test_int_of_capture(self):
        assert render("{{ int([[1]]) + 1 }}", ["iden3", "3"]) == "4"

    def test_plus_concatenates_text(self):
        assert render("{{ [[1]] + 1 }}", ["", "3"]) == "31"
        assert render('{{ [[1]] + "!" }}', ["", "hey"]) == "hey!"

    def test_evaluate_directly(self):
        node = parse_expression("[[0]] * 2")
        assert evaluate(node, ["21"]) == 42

    def test_missing_capture_is_empty_text(self):
        assert render("<{{ [[4]] }}>", ["a"]) == "<>"


class TestBuiltins:
    def test_upper_lower(self):
        assert render("{{ upper([[1]]) }}/{{ lower([[1]]) }}", ["", "Ab"]) == "AB/ab"

    def test_repeat(self):
        assert render('{{ repeat("a", 3, ",") }}') == "a,a,a"
        assert render('{{ repeat("a", 2) }}') == "aa"

    def test_identity(self):
        assert render("{{ identity(2) }}") == "1 & 0 \\\\\n0 & 1"

    def test_zeros(self):
        assert render("{{ zeros(1, 3) }}") == "0 & 0 & 0"

    def test_str(self):
        assert render("{{ str(12) + str(3) }}") == "123"


class TestTemplates:
    def test_literal_part_keeps_fields(self):
        template = compile_expression_template(r"\sqrt{ {{ upper([[1]]) }} }$0")
        result = compile_template(template, ["x", "ab"])
        assert result.text == r"\sqrt{ AB }"
        assert result.fields == {0: TabStop(11, 11)}

    def test_interpolated_values_cannot_create_fields(self):
        result = compile_template(compile_expression_template("{{ [[0]] }}"), ["$1 ${2:x}"])
        assert result.text == "$1 ${2:x}"
        assert result.fields == {}

    def test_source_is_kept(self):
        source = "{{ identity([[1]]) }}"
        assert compile_expression_template(source).source == source


class TestErrors:
    @pytest.mark.parametrize(
        "source",
        [
            "{{ exec(1) }}",
            "{{ __import__ }}",
            "{{ 1 + }}",
            "{{ }}",
            "{{ upper() }}",
            "{{ 1 2 }}",
            "{{ a.b }}",
            "{{ (1 }}",
        ],
    )
    def test_malformed_rejected_at_compile_time(self, source):
        with pytest.raises(ExpressionError):
            compile_expression_template(source)

    def test_division_by_zero_renders_error_marker(self):
        assert render("{{ 1 // 0 }}") == ERROR_MARKER

    def test_repeat_bound_enforced(self):
        assert render('{{ repeat("x", 100) }}') == ERROR_MARKER

    def test_nested_repeat_output_capped(self):
        assert len(render('{{ repeat(repeat("x", 64), 64) }}')) == 4096
        assert render('{{ repeat(repeat(repeat(repeat("x", 64), 64), 64), 64) }}') == ERROR_MARKER

    def test_concatenation_output_capped(self):
        block = 'repeat(repeat("xxxxxxxxxxxxxxxx", 64), 64)'
        assert len(render("{{ %s }}" % block)) == MAX_OUTPUT
        with pytest.raises(ExpressionError, match="exceeds"):
            evaluate(parse_expression(f'{block} + "y"'), [])

    def test_non_numeric_int_renders_error_marker(self):
        assert render("{{ int([[1]]) }}", ["", "abc"]) == ERROR_MARKER
