"""Tests for decoding terminal input and the configurable keymap."""

import pytest

from key_codes import (DEFAULT_KEYS, Binding, Keymap, decode, decode_all,
                       is_key_name, split_incomplete, split_keys)


class TestDecode:
    @pytest.mark.parametrize(
        "raw, names",
        [
            ("a", ["a"]),
            ("ab", ["a", "b"]),
            (" ", [" "]),
            ("\x1b[A\x1b[B", ["up", "down"]),
            ("\x1bOC", ["right"]),
            ("\x1b[Z", ["shift+tab"]),
            ("\x1b[3~", ["delete"]),
            ("\x1b]", ["alt+]"]),
            ("\x1b[", ["alt+["]),
            ("\x1ba", ["alt+a"]),
            ("\x12", ["ctrl+r"]),
            ("\x16", ["ctrl+v"]),
            ("\t", ["tab"]),
            ("\r", ["enter"]),
            ("\x7f", ["backspace"]),
            ("\x1b", ["escape"]),
        ],
    )
    def test_names(self, raw: str, names: list[str]) -> None:
        assert decode_all(raw) == names

    def test_sequence_followed_by_text(self) -> None:
        assert split_keys("\x1b[Dxy") == ["\x1b[D", "x", "y"]

    def test_unknown_sequence_passes_through(self) -> None:
        assert decode("\x1b[15~") == "\x1b[15~"


    @pytest.mark.parametrize(
        "text, complete, tail",
        [
            ("abc", "abc", ""),
            ("a\x1b", "a", "\x1b"),
            ("a\x1b[", "a", "\x1b["),
            ("a\x1b[1;5", "a", "\x1b[1;5"),
            ("a\x1bO", "a", "\x1bO"),
            ("a\x1b[A", "a\x1b[A", ""),
            ("\x1b[Ab\x1b]", "\x1b[Ab\x1b]", ""),
        ],
    )
    def test_split_incomplete(self, text: str, complete: str,
                              tail: str) -> None:
        assert split_incomplete(text) == (complete, tail)

class TestKeymap:
    def test_defaults(self) -> None:
        keymap = Keymap()
        assert keymap.lookup("ctrl+r") == Binding.Run
        assert keymap.lookup("ctrl+q") == Binding.Quit
        assert keymap.lookup("ctrl+c") == Binding.Quit
        assert keymap.lookup("x") is None
        assert set(keymap.bindings) == set(DEFAULT_KEYS)

    def test_override_replaces_default(self) -> None:
        keymap = Keymap({Binding.Run: "ctrl+s, alt+r"})
        assert keymap.keys_for(Binding.Run) == ["ctrl+s", "alt+r"]
        assert keymap.lookup("alt+r") == Binding.Run
        assert keymap.lookup("ctrl+r") is None

    def test_invalid_key_name(self) -> None:
        with pytest.raises(ValueError):
            Keymap({Binding.Quit: "ctrl+alt+delete"})

    def test_help_line_uses_first_key(self) -> None:
        help_line = Keymap().help_line()
        assert "ctrl+c quit" in help_line
        assert "ctrl+r run" in help_line

    @pytest.mark.parametrize("name", ["a", "tab", "ctrl+x", "alt+]", "up"])
    def test_valid_names(self, name: str) -> None:
        assert is_key_name(name)

    @pytest.mark.parametrize("name", ["", "ctrl+", "ctrl+1", "alt+ab",
                                      "super+a"])
    def test_invalid_names(self, name: str) -> None:
        assert not is_key_name(name)
