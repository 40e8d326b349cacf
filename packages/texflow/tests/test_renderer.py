"""Tests for texflow.renderer"""
from texflow.renderer import HtmlRenderer, error_fallback


class TestHtmlRenderer:
    def test_blank_source(self):
        assert HtmlRenderer().render("   ") == ""

    def test_paragraph(self):
        assert "<p>hello</p>" in HtmlRenderer().render("hello")

    def test_inline_math(self):
        assert 'class="math"' in HtmlRenderer().render("x $y$ z")

    def test_math_mode(self):
        assert 'class="math"' in HtmlRenderer().render(r"\frac{a}{b}", "math")

    def test_html_is_escaped(self):
        assert "&lt;b&gt;" in HtmlRenderer().render("<b>bold</b>")

    def test_math_mode_wraps_display_block(self):
        renderer = HtmlRenderer(markdown=lambda s: s)
        assert renderer.render(" x^2 ", "math") == "$$\nx^2\n$$\n"


class TestFallback:
    def test_exception_gives_visible_fallback(self):
        def boom(source):
            raise RuntimeError("renderer crashed")

        assert HtmlRenderer(markdown=boom).render("a<b") == '<pre class="render-error">a&lt;b</pre>\n'

    def test_non_string_result(self):
        assert HtmlRenderer(markdown=lambda s: None).render("x") == error_fallback("x")
