"""Tests for frame building and style selection."""

from dataclasses import replace

import pytest

from focus_state import Focus, Snapshot, Tab
from render import (CSI, NO_REVERSE, REVERSE, build_frame, cap_line_width,
                    draw, input_color, region_color, status_color,
                    status_text, tab_color, with_cursor)
from response_projection import Band
from tui_errors import TransportError


def joined(frame: list[str]) -> str:
    return "\n".join(frame)


class TestStyle:
    def test_status_color_per_band(self, screen) -> None:
        theme = screen.theme
        assert status_color(theme, Band.Ok) == theme.ok_color
        assert status_color(theme, Band.Redirect) == theme.redirect_color
        assert status_color(theme, Band.Error) == theme.error_color
        assert status_color(theme, Band.Empty) is None

    def test_region_color(self, screen) -> None:
        theme = screen.theme
        assert region_color(theme, Focus.Response, Focus.Response) == \
            theme.active_color
        assert region_color(theme, Focus.Input, Focus.Response) == \
            theme.border_color

    def test_input_color_follows_selected_slot(self, screen, state) -> None:
        theme = screen.theme
        assert input_color(theme, state, 0) == theme.selected_color
        assert input_color(theme, state, 1) == theme.text_color
        state.focus = Focus.Response
        assert input_color(theme, state, 0) == theme.text_color

    def test_tab_color(self, screen, state) -> None:
        theme = screen.theme
        assert tab_color(theme, state, Tab.Collection) == theme.text_color
        assert tab_color(theme, state, Tab.RequestBody) == theme.border_color
        state.focus = Focus.Response
        assert tab_color(theme, state, Tab.Collection) == theme.active_color


class TestText:
    def test_cap_line_width(self) -> None:
        assert cap_line_width(4, "abcdef") == "ab.."
        assert cap_line_width(10, "abcdef") == "abcdef"
        assert cap_line_width(2, "abcdef") == "ab"

    def test_cursor_inside_text(self) -> None:
        assert with_cursor("abc", 1, 5) == f"a{REVERSE}b{NO_REVERSE}c  "

    def test_cursor_after_text(self) -> None:
        assert with_cursor("abc", 3, 5) == f"abc{REVERSE} {NO_REVERSE} "

    def test_cursor_kept_on_screen(self) -> None:
        assert with_cursor("abcdef", 6, 4) == f"def{REVERSE} {NO_REVERSE}"

    def test_status_text(self, state) -> None:
        assert status_text(state) == ""
        state.snapshot = Snapshot(status_code=404)
        assert status_text(state) == " 404 Not Found "
        state.snapshot = Snapshot(status_code=200, reason="Fine")
        assert status_text(state) == " 200 Fine "
        state.snapshot = Snapshot(status_code=599)
        assert status_text(state) == " 599 "


class TestFrame:
    @pytest.mark.parametrize("columns, lines", [(80, 24), (120, 40), (60, 12)])
    def test_one_string_per_row(self, screen, state, columns: int,
                                lines: int) -> None:
        screen.columns, screen.lines = columns, lines
        assert len(build_frame(state, screen)) == lines

    def test_contents(self, screen, state) -> None:
        frame = joined(build_frame(state, screen))
        assert "HTTP/TABS" in frame
        assert "Collection" in frame
        assert "Response Headers" in frame
        assert "ctrl+r run" in frame

    def test_busy_indicator(self, screen, state) -> None:
        state.busy = True
        state.animation = 2
        assert "··•··" in joined(build_frame(state, screen))

    def test_status_and_latency(self, screen, state) -> None:
        state.snapshot = Snapshot(status_code=301, latency_ms=42)
        frame = joined(build_frame(state, screen))
        assert "301 Moved Permanently" in frame
        assert "42 ms" in frame

    def test_error_line(self, screen, state) -> None:
        state.snapshot.error = TransportError("boom")
        assert "Error: boom" in joined(build_frame(state, screen))

    def test_read_only_pane(self, screen, state) -> None:
        state.tab = Tab.ResponseBody
        state.focus = Focus.Response
        state.viewer.set_content("first\nsecond")
        frame = joined(build_frame(state, screen))
        assert "Response Body (read only)" in frame
        assert "second" in frame

    def test_response_cannot_drive_terminal(self, screen, state) -> None:
        state.tab = Tab.ResponseBody
        state.focus = Focus.Response
        state.viewer.set_content("hi\x1b[2J\x1b[31mX\tY")
        frame = joined(build_frame(state, screen))
        assert "\x1b[2J" not in frame
        assert "\x1b[31m" not in frame
        assert "\t" not in frame
        assert "hi\ufffd[2J\ufffd[31mX    Y" in frame

    def test_error_message_sanitized(self, screen, state) -> None:
        state.snapshot.error = TransportError("bad\x1b[2J")
        frame = joined(build_frame(state, screen))
        assert "Error: bad\ufffd[2J" in frame
        assert "\x1b[2J" not in frame

    def test_debug_line(self, screen, state) -> None:
        screen.args = replace(screen.args, debug=True)
        frame = build_frame(state, screen)
        assert "seq 0" in frame[-1]


def test_draw_positions_rows(capsys) -> None:
    draw(["one", "two"], clear=True)
    output = capsys.readouterr().out
    assert output.startswith(f"{CSI}2J")
    assert f"{CSI}1;1Hone" in output
    assert f"{CSI}2;1Htwo" in output
