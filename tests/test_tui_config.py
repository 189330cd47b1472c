"""Tests for command line and ini configuration."""

from pathlib import Path

import pytest

from key_codes import Binding
from tui_config import (DEFAULT_COLORS, Arguments, BorderStyle, ColorMode,
                        parse_args, parse_colors, parse_keymap,
                        validate_colors)


def write_config(tmp_path: Path, text: str) -> Arguments:
    path = tmp_path / "httptabs.ini"
    path.write_text(text)
    return Arguments(config_file=path)


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.color_mode == ColorMode.Bit24
        assert args.border_style == BorderStyle.Rounded
        assert args.timeout == 10
        assert args.url is None
        assert not args.debug
        assert args.config_file.name == "httptabs.ini"

    def test_flags(self) -> None:
        args = parse_args(["-m", "8BIT", "-b", "double", "-t", "2.5",
                           "-u", "http://localhost", "-X", "put",
                           "-c", "custom.ini", "--log-file", "x.log", "-g"])
        assert args.color_mode == ColorMode.Bit8
        assert args.border_style == BorderStyle.Double
        assert args.timeout == 2.5
        assert args.url == "http://localhost"
        assert args.method == "put"
        assert args.config_file == Path("custom.ini")
        assert args.log_file == Path("x.log")
        assert args.debug

    @pytest.mark.parametrize("timeout", ["0", "-1"])
    def test_timeout_must_be_positive(self, timeout: str) -> None:
        with pytest.raises(SystemExit):
            parse_args(["-t", timeout])

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            parse_args(["-m", "16bit"])


class TestColors:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        args = Arguments(config_file=tmp_path / "missing.ini")
        theme = parse_colors(args)
        assert theme.ok_color == DEFAULT_COLORS["24bit"]["ok_color"]
        assert theme.selected_color == \
            DEFAULT_COLORS["24bit"]["active_request_color"]

    def test_file_overrides(self, tmp_path: Path) -> None:
        args = write_config(tmp_path, "[4bit]\nerror_color = 31\n")
        args.color_mode = ColorMode.Bit4
        theme = parse_colors(args)
        assert theme.error_color == "31"
        assert theme.ok_color == DEFAULT_COLORS["4bit"]["ok_color"]

    def test_invalid_file_color(self, tmp_path: Path) -> None:
        args = write_config(tmp_path, "[24bit]\ntext_color = 1,2\n")
        with pytest.raises(ValueError):
            parse_colors(args)

    @pytest.mark.parametrize(
        "color, mode, expected",
        [
            ("1, 2, 3", ColorMode.Bit24, "1,2,3"),
            (" 42", ColorMode.Bit8, "42"),
            ("91", ColorMode.Bit4, "91"),
        ],
    )
    def test_validate(self, color: str, mode: ColorMode,
                      expected: str) -> None:
        assert validate_colors("text_color", color, mode) == expected

    @pytest.mark.parametrize(
        "color, mode",
        [
            ("red", ColorMode.Bit24),
            ("1,2,x", ColorMode.Bit24),
            ("1,2,3", ColorMode.Bit8),
            ("", ColorMode.Bit4),
        ],
    )
    def test_validate_rejects(self, color: str, mode: ColorMode) -> None:
        with pytest.raises(ValueError):
            validate_colors("text_color", color, mode)


class TestKeymap:
    def test_defaults_without_section(self, tmp_path: Path) -> None:
        keymap = parse_keymap(Arguments(config_file=tmp_path / "none.ini"))
        assert keymap.lookup("ctrl+r") == Binding.Run

    def test_section_overrides(self, tmp_path: Path) -> None:
        args = write_config(tmp_path, "[keys]\nrun = ctrl+s\nquit = ctrl+x\n")
        keymap = parse_keymap(args)
        assert keymap.lookup("ctrl+s") == Binding.Run
        assert keymap.lookup("ctrl+x") == Binding.Quit
        assert keymap.lookup("ctrl+q") is None
        assert keymap.lookup("alt+a") == Binding.AddToCollection

    def test_invalid_key(self, tmp_path: Path) -> None:
        args = write_config(tmp_path, "[keys]\nrun = hyper+r\n")
        with pytest.raises(ValueError):
            parse_keymap(args)


def test_shipped_config_is_valid() -> None:
    path = Path(__file__).parent.parent / "httptabs.ini"
    for mode in ColorMode:
        args = Arguments(config_file=path, color_mode=mode)
        parse_colors(args)
    parse_keymap(Arguments(config_file=path))
