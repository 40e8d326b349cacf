"""Tests for texflow.keys — key events, key ids and sequence notation"""
import pytest

from texflow.keys import KeyEvent, key_id_for, normalize_key_id, parse_key_sequence


class TestNormalizeKeyId:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Ctrl+Shift+Z", "ctrl+shift+z"),
            ("shift+ctrl+z", "ctrl+shift+z"),
            ("Control+Option+ArrowUp", "ctrl+alt+up"),
            ("alt+/", "alt+/"),
            ("ctrl++", "ctrl++"),
            ("ctrl+plus", "ctrl++"),
            ("Esc", "escape"),
            ("cmd+s", "meta+s"),
            (" tab ", "tab"),
        ],
    )
    def test_canonical_spelling(self, raw, expected):
        assert normalize_key_id(raw) == expected

    def test_unknown_modifier(self):
        with pytest.raises(ValueError):
            normalize_key_id("hyper+x")

    def test_empty(self):
        with pytest.raises(ValueError):
            normalize_key_id("  ")


class TestKeyEvent:
    def test_key_id(self):
        assert key_id_for(KeyEvent("z", ctrl=True, shift=True)) == "ctrl+shift+z"
        assert key_id_for(KeyEvent("Z", ctrl=True, shift=True)) == "ctrl+shift+z"
        assert key_id_for(KeyEvent("up", alt=True)) == "alt+up"
        assert key_id_for(KeyEvent("Tab")) == "tab"

    def test_char(self):
        assert KeyEvent("a").char == "a"
        assert KeyEvent("A", shift=True).char == "A"
        assert KeyEvent(" ").char == " "
        assert KeyEvent("space").char == " "

    def test_no_char_for_commands(self):
        assert KeyEvent("a", ctrl=True).char is None
        assert KeyEvent("/", alt=True).char is None
        assert KeyEvent("tab").char is None
        assert KeyEvent("backspace").char is None


class TestParseKeySequence:
    def test_plain_characters(self):
        assert parse_key_sequence("ab") == [KeyEvent("a"), KeyEvent("b")]

    def test_special_keys(self):
        events = parse_key_sequence("<tab><cr><bs><esc>")
        assert [e.name for e in events] == ["tab", "enter", "backspace", "escape"]

    def test_modifiers(self):
        events = parse_key_sequence("<c-z><a-/><c-s-z><a-up>")
        assert events == [
            KeyEvent("z", ctrl=True),
            KeyEvent("/", alt=True),
            KeyEvent("z", ctrl=True, shift=True),
            KeyEvent("up", alt=True),
        ]

    def test_dash_key(self):
        assert parse_key_sequence("<c-->") == [KeyEvent("-", ctrl=True)]

    def test_literal_less_than(self):
        assert parse_key_sequence("a<lt>b") == [KeyEvent("a"), KeyEvent("<"), KeyEvent("b")]

    def test_newline_is_enter(self):
        assert parse_key_sequence("\n") == [KeyEvent("enter")]

    def test_unknown_modifier(self):
        with pytest.raises(ValueError):
            parse_key_sequence("<x-a>")
