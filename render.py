from dataclasses import dataclass
from http import HTTPStatus
from typing import Optional
import sys

from focus_state import (EDITABLE_TABS, TAB_TITLES, Focus, InteractionState,
                         Tab)
from key_codes import Keymap
from response_projection import ANIMATION_FRAMES, Band, status_band
from text_buffer import CONTROL_CHARS, TAB_WIDTH, TextArea
from tui_config import Arguments, BorderStyle, ColorMode, Theme


TITLE = "HTTP/TABS"     # For main application

ESC = "\x1b"            # Escape
CSI = f"{ESC}["         # Control Sequence Introducer

EN_ALT_BUF = "?1049h"   # Enable Alternate Buffer
DIS_ALT_BUF = "?1049l"  # Disable Alternate Buffer

REVERSE = f"{CSI}7m"
NO_REVERSE = f"{CSI}27m"
RESET = f"{CSI}0m"
REPLACEMENT = "\ufffd"  # Stands in for control characters

HEADER_ROWS = 3         # Title box
INPUT_ROWS = 3          # URL, Method, message line
TAB_ROWS = 1
FOOTER_ROWS = 1


@dataclass
class Border:
    # Border {{{
    h_single = "─"
    h_double = "═"
    v_single = "│"
    v_double = "║"
    ltc_single = "┌"
    ltc_double = "╔"
    ltc_rounded = "╭"
    lbc_single = "└"
    lbc_double = "╚"
    lbc_rounded = "╰"
    rtc_single = "┐"
    rtc_double = "╗"
    rtc_rounded = "╮"
    rbc_single = "┘"
    rbc_double = "╝"
    rbc_rounded = "╯"
    # }}}


@dataclass
class Screen:
    """
    Everything rendering needs besides the interaction state
    """
    # Screen {{{
    theme:   Theme
    args:    Arguments
    keymap:  Keymap
    borders: dict
    columns: int = 80
    lines:   int = 24
    # }}}


def populate_borders(style: BorderStyle) -> dict:
    # populate_borders {{{
    borders = {}
    if style == BorderStyle.Double:
        borders["h_border"] = Border.h_double
        borders["v_border"] = Border.v_double
        borders["lt_corner"] = Border.ltc_double
        borders["lb_corner"] = Border.lbc_double
        borders["rt_corner"] = Border.rtc_double
        borders["rb_corner"] = Border.rbc_double
        return borders

    borders["h_border"] = Border.h_single
    borders["v_border"] = Border.v_single
    if style == BorderStyle.Rounded:
        borders["lt_corner"] = Border.ltc_rounded
        borders["lb_corner"] = Border.lbc_rounded
        borders["rt_corner"] = Border.rtc_rounded
        borders["rb_corner"] = Border.rbc_rounded
    else:
        borders["lt_corner"] = Border.ltc_single
        borders["lb_corner"] = Border.lbc_single
        borders["rt_corner"] = Border.rtc_single
        borders["rb_corner"] = Border.rbc_single
    return borders
    # }}}


def get_foreground(color: str, mode: ColorMode) -> str:
    # get_foreground {{{
    match mode:
        case ColorMode.Bit4:
            return f"{CSI}{color}m"
        case ColorMode.Bit8:
            return f"{CSI}38;5;{color}m"
        case ColorMode.Bit24:
            r, g, b = color.split(",")
            return f"{CSI}38;2;{r};{g};{b}m"
    # }}}


# Style selection, pure functions of focus and tab {{{
def region_color(theme: Theme, focus: Focus, region: Focus) -> str:
    return theme.active_color if focus == region else theme.border_color


def input_color(theme: Theme, state: InteractionState, index: int) -> str:
    if state.focus == Focus.Input and state.input_index == index:
        return theme.selected_color
    return theme.text_color


def tab_color(theme: Theme, state: InteractionState, tab: Tab) -> str:
    if tab != state.tab:
        return theme.border_color
    if state.focus == Focus.Response:
        return theme.active_color
    return theme.text_color


def status_color(theme: Theme, band: Band) -> Optional[str]:
    match band:
        case Band.Ok:
            return theme.ok_color
        case Band.Redirect:
            return theme.redirect_color
        case Band.Error:
            return theme.error_color
        case Band.Empty:
            return None
# }}}


def cap_line_width(max_w: int, line: str) -> str:
    """
    Cuts a line short, appending with ..
    to indicate this
    """
    # cap_line_width {{{
    if max_w <= 2:
        return line[:max(0, max_w)]
    if len(line) > max_w:
        line = line[:max_w - 2] + ".."
    return line
    # }}}


def displayable(line: str) -> str:
    """
    Text from outside the interface, response content or error
    messages, with tabs expanded and control characters replaced
    so nothing but the frame itself reaches the terminal
    """
    # displayable {{{
    return CONTROL_CHARS.sub(REPLACEMENT, line.expandtabs(TAB_WIDTH))
    # }}}


def pad(line: str, width: int) -> str:
    # pad {{{
    line = cap_line_width(width, line)
    return f"{line}{' ' * (width - len(line))}"
    # }}}


def with_cursor(text: str, cursor: int, width: int) -> str:
    """
    Shows the cursor as a reverse video cell, shifting the
    visible window so the cursor always stays on screen
    """
    # with_cursor {{{
    start = max(0, cursor - width + 1)
    visible = text[start:start + width]
    column = cursor - start

    if column >= len(visible):
        visible = visible + " "
    head, cell, tail = visible[:column], visible[column], visible[column + 1:]
    line = f"{head}{REVERSE}{cell}{NO_REVERSE}{tail}"
    return line + " " * max(0, width - len(visible))
    # }}}


def busy_indicator(state: InteractionState) -> str:
    """
    ··•·· where the large dot walks along with each tick
    """
    # busy_indicator {{{
    small = "·"
    large = "•"
    return "".join(large if i == state.animation else small
                   for i in range(ANIMATION_FRAMES))
    # }}}


def status_text(state: InteractionState) -> str:
    # status_text {{{
    code = state.snapshot.status_code
    if code <= 0:
        return ""
    reason = displayable(state.snapshot.reason)
    if reason == "":
        try:
            reason = HTTPStatus(code).phrase
        except ValueError:
            reason = ""
    return f" {code} {reason} " if reason else f" {code} "
    # }}}


def build_header(state: InteractionState, screen: Screen) -> list[str]:
    """
    ╭───────────────────────╮
    │                Title  │
    ╰───────────────────────╯
    """
    # build_header {{{
    mode = screen.args.color_mode
    borders = screen.borders
    width = screen.columns - 2
    border = get_foreground(screen.theme.border_color, mode)
    title = get_foreground(screen.theme.title_color, mode)

    middle = pad(f"{' ' * max(0, width - len(TITLE) - 2)}{TITLE}", width)
    return [
        f"{border}{borders['lt_corner']}{borders['h_border'] * width}"
        f"{borders['rt_corner']}",
        f"{border}{borders['v_border']}{title}{middle}"
        f"{border}{borders['v_border']}",
        f"{border}{borders['lb_corner']}{borders['h_border'] * width}"
        f"{borders['rb_corner']}",
    ]
    # }}}


def build_inputs(state: InteractionState, screen: Screen) -> list[str]:
    """
    URL and Method slots, followed by the busy indicator or the
    latency, the status indicator and the message line
    """
    # build_inputs {{{
    mode = screen.args.color_mode
    theme = screen.theme
    label_w = max(len(line.label) for line in state.inputs) + 3
    rows = []

    for index, line in enumerate(state.inputs):
        suffix = ""
        if index == 0 and state.busy:
            suffix = busy_indicator(state)
        elif index == 0 and state.snapshot.latency_ms is not None:
            suffix = f"{state.snapshot.latency_ms} ms"
        elif index == 1:
            suffix = status_text(state)

        width = max(1, screen.columns - label_w - len(suffix) - 6)
        value = with_cursor(line.value, line.cursor, width) \
            if line.focused else pad(line.value, width)

        color = get_foreground(input_color(theme, state, index), mode)
        label = f"{line.label} > ".rjust(label_w)
        row = f" {color}{label}{value}    "

        band = status_band(state.snapshot.status_code)
        band_color = status_color(theme, band) if index == 1 else None
        if band_color is not None:
            row += f"{get_foreground(band_color, mode)}{REVERSE}" \
                f"{suffix}{NO_REVERSE}"
        else:
            row += f"{get_foreground(theme.text_color, mode)}{suffix}"
        rows.append(row)

    if state.snapshot.error is not None:
        message = f"Error: {displayable(str(state.snapshot.error))}"
        color = theme.error_color
    else:
        message = displayable(state.info)
        color = theme.text_color
    rows.append(f" {get_foreground(color, mode)}"
                f"{pad(message, screen.columns - 2)}")
    return rows
    # }}}


def build_tabs(state: InteractionState, screen: Screen) -> str:
    # build_tabs {{{
    mode = screen.args.color_mode
    separator = get_foreground(screen.theme.border_color, mode) + \
        screen.borders["v_border"]
    cells = []

    for tab in Tab:
        title = f" {TAB_TITLES[tab]} "
        color = get_foreground(tab_color(screen.theme, state, tab), mode)
        if tab == state.tab:
            cells.append(f"{color}{REVERSE}{title}{NO_REVERSE}")
        else:
            cells.append(f"{color}{title}")

    return " " + separator.join(cells)
    # }}}


def pane_lines(state: InteractionState, width: int, height: int) -> list[str]:
    """
    Visible rows of the active tab: the editable buffer with its
    cursor, or the viewer window at its scroll offsets
    """
    # pane_lines {{{
    area: Optional[TextArea] = state.buffers.get(state.tab)

    if area is None:
        lines = state.viewer.content.splitlines()
        top = state.viewer.scroll_y
        left = state.viewer.scroll_x
        visible = [pad(displayable(line)[left:], width)
                   for line in lines[top:top + height]]
    else:
        top = max(0, area.row - height + 1)
        visible = []
        for row, line in enumerate(area.lines[top:top + height], top):
            if area.focused and row == area.row:
                visible.append(with_cursor(line, area.col, width))
            else:
                visible.append(pad(line, width))

    visible += [" " * width] * (height - len(visible))
    return visible
    # }}}


def build_pane(state: InteractionState, screen: Screen) -> list[str]:
    """
    ╭─ Response Body ────╮
    │ ...                │
    ╰────────────────────╯
    """
    # build_pane {{{
    mode = screen.args.color_mode
    borders = screen.borders
    width = screen.columns - 2
    height = max(1, screen.lines - HEADER_ROWS - INPUT_ROWS - TAB_ROWS
                 - FOOTER_ROWS - 2)

    border = get_foreground(
        region_color(screen.theme, state.focus, Focus.Response), mode)
    text = get_foreground(screen.theme.text_color, mode)

    title = f" {TAB_TITLES[state.tab]} "
    if state.tab not in EDITABLE_TABS:
        title += "(read only) "
    top = f"{border}{borders['lt_corner']}{borders['h_border']}" \
        f"{text}{title}{border}" \
        f"{borders['h_border'] * max(0, width - len(title) - 1)}" \
        f"{borders['rt_corner']}"

    rows = [top]
    for line in pane_lines(state, width - 2, height):
        rows.append(f"{border}{borders['v_border']} {text}{line} "
                    f"{border}{borders['v_border']}")
    rows.append(f"{border}{borders['lb_corner']}"
                f"{borders['h_border'] * width}{borders['rb_corner']}")
    return rows
    # }}}


def build_debug(state: InteractionState, screen: Screen) -> str:
    # build_debug {{{
    debug = \
        f"wid {screen.columns} hgt {screen.lines} | " + \
        f"foc {state.focus.value} | tab {state.tab.value} | " + \
        f"inp {state.input_index} | cur {state.cursor_pos} | " + \
        f"scr {state.viewer.scroll_x} {state.viewer.scroll_y} | " + \
        f"seq {state.latest_seq} | busy {int(state.busy)}"
    return f" {pad(debug, screen.columns - 2)}"
    # }}}


def build_frame(state: InteractionState, screen: Screen) -> list[str]:
    """
    Main frame builder, one string per terminal row.
    Writes nothing, see draw.
    """
    # build_frame {{{
    frame = build_header(state, screen)
    frame += build_inputs(state, screen)
    frame.append(build_tabs(state, screen))
    frame += build_pane(state, screen)

    text = get_foreground(screen.theme.border_color, screen.args.color_mode)
    if screen.args.debug:
        frame.append(f"{text}{build_debug(state, screen)}")
    else:
        help_line = pad(screen.keymap.help_line(), screen.columns - 2)
        frame.append(f"{text} {help_line}")
    return frame
    # }}}


def draw(frame: list[str], clear: bool = False) -> None:
    # draw {{{
    output = []
    if clear:
        output.append(f"{CSI}2J")
    for row, line in enumerate(frame, 1):
        output.append(f"{CSI}{row};1H{line}{RESET}{CSI}0K")
    sys.stdout.write("".join(output))
    sys.stdout.flush()
    # }}}


def draw_failure(theme: Theme, mode: ColorMode) -> None:
    # draw_failure {{{
    sys.stdout.write(f"{CSI}2J{CSI}2;2H{get_foreground(theme.text_color, mode)}"
                     "An unexpected exception occured"
                     f"{CSI}3;2HPress any key to continue{RESET}")
    sys.stdout.flush()
    # }}}


def enable_buffer() -> None:
    """
    Creates a new screen buffer
    """
    # enable_buffer {{{
    sys.stdout.write(f"{CSI}{EN_ALT_BUF}")
    sys.stdout.flush()
    # }}}


def disable_buffer() -> None:
    """
    Reverts screen back to
    previous state before script
    """
    # disable_buffer {{{
    sys.stdout.write(f"{CSI}{DIS_ALT_BUF}")
    sys.stdout.flush()
    # }}}


def hide_cursor() -> None:
    # hide_cursor {{{
    sys.stdout.write(f"{CSI}?25l")
    sys.stdout.flush()
    # }}}


def show_cursor() -> None:
    # show_cursor {{{
    sys.stdout.write(f"{CSI}?25h")
    sys.stdout.flush()
    # }}}
