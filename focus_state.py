from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union
import logging
import os
import pyperclip

from header_template import resolve_headers
from key_codes import Binding, Keymap
from req_collection import Collection
from request_dispatch import RequestDraft
from text_buffer import TAB_WIDTH, LineInput, TextArea
from tui_errors import ClipboardError, ParseError, TuiError


logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "https://v2.jokeapi.dev/joke/Any?type=twopart"
PLACEHOLDER_METHOD = "GET"

URL_SLOT = 0
METHOD_SLOT = 1


class Focus(Enum):
    # Focus {{{
    Input = 0
    Response = 1
    # }}}


class Tab(Enum):
    # Tab {{{
    Collection = 0
    RequestHeaders = 1
    RequestBody = 2
    ResponseBody = 3
    ResponseHeaders = 4
    # }}}


TAB_TITLES = {
    Tab.Collection: "Collection",
    Tab.RequestHeaders: "Request Headers",
    Tab.RequestBody: "Request Body",
    Tab.ResponseBody: "Response Body",
    Tab.ResponseHeaders: "Response Headers",
}

EDITABLE_TABS = (Tab.Collection, Tab.RequestHeaders, Tab.RequestBody)


@dataclass
class Snapshot:
    """
    Outcome of the most recent request, replaced
    as a whole once a request completes or fails
    """
    # Snapshot {{{
    status_code: int = 0
    reason:      str = ""
    body:        str = ""
    headers:     str = ""
    latency_ms:  Optional[int] = None
    error:       Optional[TuiError] = None
    # }}}


@dataclass
class Viewer:
    """
    Read only pane showing response content. Scroll offsets
    never go negative and never pass the last line.
    """
    # Viewer {{{
    content:  str = ""
    scroll_x: int = 0
    scroll_y: int = 0

    def set_content(self, content: str) -> None:
        self.content = content
        self.scroll_x = 0
        self.scroll_y = 0

    def scroll(self, dx: int, dy: int) -> None:
        lines = self.content.splitlines()
        widest = max((len(line.expandtabs(TAB_WIDTH)) for line in lines),
                     default=0)
        self.scroll_x = max(0, min(self.scroll_x + dx, max(0, widest - 1)))
        self.scroll_y = max(0, min(self.scroll_y + dy, max(0, len(lines) - 1)))
    # }}}


@dataclass(frozen=True)
class RunCommand:
    # RunCommand {{{
    draft: RequestDraft
    # }}}


@dataclass(frozen=True)
class QuitCommand:
    # QuitCommand {{{
    pass
    # }}}


Command = Union[RunCommand, QuitCommand]


def _default_inputs() -> list[LineInput]:
    # _default_inputs {{{
    return [
        LineInput(PLACEHOLDER_URL, char_limit=256, label="URL"),
        LineInput(PLACEHOLDER_METHOD, char_limit=10, label="Method"),
    ]
    # }}}


def _default_buffers() -> dict[Tab, TextArea]:
    # _default_buffers {{{
    return {tab: TextArea() for tab in EDITABLE_TABS}
    # }}}


@dataclass
class InteractionState:
    """
    Everything the interaction loop knows. Each slot and
    buffer owns its cursor; active_buffer says whose
    cursor the keyboard is currently driving.
    """
    # InteractionState {{{
    inputs:      list[LineInput] = field(default_factory=_default_inputs)
    buffers:     dict[Tab, TextArea] = field(default_factory=_default_buffers)
    focus:       Focus = Focus.Input
    tab:         Tab = Tab.Collection
    input_index: int = 0

    tab_content: dict[Tab, str] = field(
        default_factory=lambda: {Tab.ResponseBody: "",
                                 Tab.ResponseHeaders: ""}
    )
    viewer:     Viewer = field(default_factory=Viewer)
    snapshot:   Snapshot = field(default_factory=Snapshot)
    collection: Collection = field(default_factory=Collection)

    busy:       bool = False
    animation:  int = 0
    latest_seq: int = 0
    info:       str = ""

    def __post_init__(self) -> None:
        sync_focus(self)

    def active_buffer(self) -> Optional[Union[LineInput, TextArea]]:
        if self.focus == Focus.Input:
            return self.inputs[self.input_index]
        return self.buffers.get(self.tab)

    @property
    def cursor_pos(self) -> int:
        buffer = self.active_buffer()
        if isinstance(buffer, LineInput):
            return buffer.cursor
        if isinstance(buffer, TextArea):
            return buffer.col
        return 0

    def content_for(self, tab: Tab) -> str:
        if tab in self.buffers:
            return self.buffers[tab].value
        return self.tab_content.get(tab, "")

    def report(self, error: TuiError) -> None:
        logger.warning("%s: %s", error.__class__.__name__, error)
        self.snapshot.error = error
        self.info = ""
    # }}}


def read_clipboard() -> str:
    # read_clipboard {{{
    try:
        return pyperclip.paste()
    except pyperclip.PyperclipException as exception:
        raise ClipboardError(f"Clipboard unavailable: {exception}") \
            from exception
    # }}}


def handle_key(state: InteractionState, key: str, keymap: Keymap,
               clipboard: Callable[[], str] = read_clipboard,
               getenv: Callable[[str], Optional[str]] = os.environ.get
               ) -> Optional[Command]:
    """
    Single entry point for key input. Mutates the state in
    place and returns a command when the loop has to act.
    """
    # handle_key {{{
    match keymap.lookup(key):
        case Binding.Quit:
            return QuitCommand()

        case Binding.NextView | Binding.PrevView:
            change_focus(state)

        case Binding.NextTab:
            cycle_tab(state, 1)

        case Binding.PrevTab:
            cycle_tab(state, -1)

        case Binding.CursorLeft:
            move_horizontal(state, -1)

        case Binding.CursorRight:
            move_horizontal(state, 1)

        case Binding.CursorUp:
            move_vertical(state, -1)

        case Binding.CursorDown:
            move_vertical(state, 1)

        case (Binding.ScrollLeft | Binding.ScrollDown |
              Binding.ScrollUp | Binding.ScrollRight) as binding:
            if viewer_active(state):
                dx, dy = SCROLL_STEPS[binding]
                state.viewer.scroll(dx, dy)
            else:
                edit_key(state, key)

        case Binding.Paste:
            paste(state, clipboard)

        case Binding.Run:
            return run(state, getenv)

        case Binding.AddToCollection:
            add_to_collection(state, getenv)

        case Binding.ExtractFromCollection:
            extract_from_collection(state)

        case None:
            edit_key(state, key)

    return None
    # }}}


SCROLL_STEPS = {
    Binding.ScrollLeft: (-1, 0),
    Binding.ScrollDown: (0, 1),
    Binding.ScrollUp: (0, -1),
    Binding.ScrollRight: (1, 0),
}


def viewer_active(state: InteractionState) -> bool:
    # viewer_active {{{
    return state.focus == Focus.Response and state.tab not in EDITABLE_TABS
    # }}}


def sync_focus(state: InteractionState) -> None:
    """
    Blurs every slot and buffer, then focuses the one
    that currently owns the keyboard, if any.
    """
    # sync_focus {{{
    for line in state.inputs:
        line.blur()
    for area in state.buffers.values():
        area.blur()

    active = state.active_buffer()
    if active is not None:
        active.focus()
    # }}}


def change_focus(state: InteractionState) -> None:
    # change_focus {{{
    if state.focus == Focus.Input:
        state.focus = Focus.Response
        area = state.buffers.get(state.tab)
        if area is not None:
            area.cursor_end_of_line()
    else:
        state.focus = Focus.Input
        state.inputs[state.input_index].cursor_end()

    sync_focus(state)
    # }}}


def cycle_tab(state: InteractionState, step: int) -> None:
    """
    Cycles input slots while the input region has focus,
    tabs otherwise. Both wrap around in either direction.
    """
    # cycle_tab {{{
    if state.focus == Focus.Input:
        state.input_index = (state.input_index + step) % len(state.inputs)
        state.inputs[state.input_index].cursor_end()
    else:
        tabs = list(Tab)
        index = (tabs.index(state.tab) + step) % len(tabs)
        state.tab = tabs[index]
        if state.tab not in EDITABLE_TABS:
            state.viewer.set_content(state.content_for(state.tab))

    sync_focus(state)
    # }}}


def move_horizontal(state: InteractionState, delta: int) -> None:
    # move_horizontal {{{
    if viewer_active(state):
        state.viewer.scroll(delta, 0)
        return

    active = state.active_buffer()
    if isinstance(active, LineInput):
        active.move_cursor(delta)
    elif isinstance(active, TextArea):
        active.move_column(delta)
    # }}}


def move_vertical(state: InteractionState, delta: int) -> None:
    # move_vertical {{{
    if viewer_active(state):
        state.viewer.scroll(0, delta)
        return

    active = state.active_buffer()
    if isinstance(active, TextArea):
        active.move_row(delta)
    # }}}


def edit_key(state: InteractionState, key: str) -> None:
    """
    Routes printable characters, backspace and enter to
    whichever slot or buffer holds focus
    """
    # edit_key {{{
    active = state.active_buffer()
    if active is None:
        return

    if key == "backspace":
        active.backspace()
    elif key == "enter":
        if isinstance(active, TextArea):
            active.newline()
    elif len(key) == 1 and key.isprintable():
        active.insert(key)
    # }}}


def paste(state: InteractionState, clipboard: Callable[[], str]) -> None:
    # paste {{{
    active = state.active_buffer()
    if active is None:
        return

    try:
        text = clipboard()
    except ClipboardError as error:
        state.report(error)
        return

    active.insert(text or "")
    # }}}


def build_draft(state: InteractionState,
                getenv: Callable[[str], Optional[str]] = os.environ.get
                ) -> RequestDraft:
    # build_draft {{{
    return RequestDraft(
        url=state.inputs[URL_SLOT].value,
        method=state.inputs[METHOD_SLOT].value,
        headers=resolve_headers(state.buffers[Tab.RequestHeaders].value,
                                getenv),
        body=state.buffers[Tab.RequestBody].value
    )
    # }}}


def run(state: InteractionState,
        getenv: Callable[[str], Optional[str]] = os.environ.get
        ) -> RunCommand:
    # run {{{
    draft = build_draft(state, getenv)
    state.busy = True
    state.animation = 0
    state.snapshot.latency_ms = None
    return RunCommand(draft)
    # }}}


def add_to_collection(state: InteractionState,
                      getenv: Callable[[str], Optional[str]] = os.environ.get
                      ) -> None:
    """
    Merges the current URL, method and resolved headers into
    the collection and rewrites the collection buffer
    """
    # add_to_collection {{{
    headers = resolve_headers(state.buffers[Tab.RequestHeaders].value, getenv)
    try:
        state.collection.add(state.inputs[URL_SLOT].value,
                             state.inputs[METHOD_SLOT].value, headers)
    except ParseError as error:
        state.report(error)
        return

    state.buffers[Tab.Collection].set_value(state.collection.to_text())
    # }}}


def extract_from_collection(state: InteractionState) -> None:
    """
    Loads the request under the collection cursor
    into the URL and Method slots
    """
    # extract_from_collection {{{
    area = state.buffers[Tab.Collection]
    try:
        extracted = state.collection.extract(area.value, area.row)
    except ParseError as error:
        state.report(error)
        return

    if extracted is None:
        state.info = ""
        return

    if extracted.url is None:
        state.info = f"'{extracted.key}'"
        return

    state.inputs[URL_SLOT].set_value(extracted.url)
    state.inputs[METHOD_SLOT].set_value(extracted.method)
    state.info = f"Loaded {extracted.method} {extracted.url}"
    # }}}
