"""Tests for texflow.template — field syntax, placeholders and visit order"""
from texflow.template import ERROR_MARKER, compile_template, escape_field_syntax, parse_fields
from texflow.types import FunctionTemplate, TabStop, TextTemplate


def compile_text(text, captures=(), visual=""):
    return compile_template(TextTemplate(text), captures, visual)


class TestPlainText:
    def test_no_markers_gives_single_exit_at_end(self):
        result = compile_text(r"\alpha + x")
        assert result.text == r"\alpha + x"
        assert result.entry == TabStop(10, 10)
        assert result.remaining == []

    def test_plain_text_compiles_to_itself(self):
        source = "plain text (with punctuation) 1+2=3"
        assert compile_text(source).text == source

    def test_escapes_resolved(self):
        assert compile_text(r"\$5 \} \\x").text == r"$5 } \x"

    def test_latex_commands_pass_through(self):
        assert compile_text(r"\frac{a}{b}").text == r"\frac{a}{b}"

    def test_dollar_without_digit_is_literal(self):
        result = compile_text("$x$")
        assert result.text == "$x$"
        assert result.fields == {}

    def test_unterminated_default_is_literal(self):
        result = compile_text("${1:abc")
        assert result.text == "${1:abc"
        assert result.fields == {}


class TestFields:
    def test_one_and_zero(self):
        result = compile_text("$1 and $0")
        assert result.text == " and "
        assert result.entry == TabStop(0, 0)
        assert result.remaining == [TabStop(5, 5)]

    def test_zero_is_visited_last(self):
        result = compile_text(r"\frac{$1}{$2}$0")
        assert result.text == r"\frac{}{}"
        assert result.entry == TabStop(6, 6)
        assert result.remaining == [TabStop(8, 8), TabStop(9, 9)]

    def test_ascending_order_regardless_of_position(self):
        result = compile_text("$2 $1 $3")
        assert result.entry == TabStop(1, 1)
        assert result.remaining == [TabStop(0, 0), TabStop(2, 2), TabStop(2, 2)]

    def test_implicit_exit_added_without_zero(self):
        result = compile_text("${1:i}=${2:1}")
        assert result.text == "i=1"
        assert result.entry == TabStop(0, 1)
        assert result.remaining == [TabStop(2, 3), TabStop(3, 3)]

    def test_only_zero(self):
        result = compile_text("a$0b")
        assert result.entry == TabStop(1, 1)
        assert result.remaining == []

    def test_default_with_escaped_brace(self):
        result = compile_text(r"${1:\}x}y")
        assert result.text == "}xy"
        assert result.fields[1] == TabStop(0, 2)

    def test_default_keeps_latex_backslash(self):
        result = compile_text(r"${2:\infty}")
        assert result.text == r"\infty"
        assert result.fields[2] == TabStop(0, 6)

    def test_mirrored_field_only_first_is_navigable(self):
        result = compile_text(r"\ket{${1:\psi}} \bra{${1:\psi}} $0")
        assert result.text == r"\ket{\psi} \bra{\psi} "
        assert result.fields == {1: TabStop(5, 9), 0: TabStop(22, 22)}
        assert result.entry == TabStop(5, 9)
        assert result.remaining == [TabStop(22, 22)]

    def test_field_ids_are_single_digits(self):
        assert parse_fields("$12") == ("2", {1: TabStop(0, 0)})
        result = compile_text("${12:x}")
        assert result.text == "${12:x}"
        assert result.fields == {}

    def test_parse_fields_keeps_first_range(self):
        text, fields = parse_fields("$1a$1")
        assert text == "a"
        assert fields == {1: TabStop(0, 0)}


class TestPlaceholders:
    def test_captures_substituted(self):
        assert compile_text("[[0]]_{[[1]]}", ["x", "2"]).text == "x_{2}"

    def test_missing_or_none_capture_is_empty(self):
        assert compile_text("[[0]][[1]][[5]]", ["a", None]).text == "a"

    def test_substitution_is_not_recursive(self):
        assert compile_text("[[0]]_{[[1]]}", ["[[1]]", "y"]).text == "[[1]]_{y}"

    def test_visual_substituted(self):
        assert compile_text(r"\sqrt{ ${VISUAL} }", visual="x").text == r"\sqrt{ x }"

    def test_visual_value_not_rescanned_for_captures(self):
        assert compile_text("${VISUAL}", ["z"], visual="[[0]]").text == "[[0]]"

    def test_escaped_visual_stays_literal(self):
        visual = escape_field_syntax("a$1}")
        result = compile_text("(${VISUAL})$0", visual=visual)
        assert result.text == "(a$1})"
        assert list(result.fields) == [0]


class TestFunctionTemplates:
    def test_receives_captures(self):
        template = FunctionTemplate(lambda caps: f"{caps[0]}-{caps[1]}$0")
        result = compile_template(template, ["a", "b"])
        assert result.text == "a-b"
        assert result.entry == TabStop(3, 3)

    def test_exception_becomes_error_marker(self):
        def boom(caps):
            raise RuntimeError("nope")

        result = compile_template(FunctionTemplate(boom), ["x"])
        assert result.text == ERROR_MARKER

    def test_non_string_becomes_error_marker(self):
        result = compile_template(FunctionTemplate(lambda caps: 42), [])
        assert result.text == ERROR_MARKER


class TestEscapeFieldSyntax:
    def test_escaped_text_compiles_back(self):
        raw = r"a$1\}{x}\\${2:y}"
        assert compile_text(escape_field_syntax(raw)).text == raw
