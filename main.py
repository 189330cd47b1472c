from queue import Empty, Queue
from typing import Callable, Optional
import logging
import os
import shutil
import signal
import sys
import threading
import traceback

from focus_state import (METHOD_SLOT, URL_SLOT, InteractionState,
                         QuitCommand, RunCommand, handle_key, read_clipboard)
from key_codes import Keymap
from render import (Screen, build_frame, disable_buffer, draw, draw_failure,
                    enable_buffer, hide_cursor, populate_borders, show_cursor)
from request_dispatch import Dispatcher
from response_projection import (advance_animation, apply_failure,
                                 apply_success)
from tui_config import (Arguments, Theme, parse_args, parse_colors,
                        parse_keymap, read_config)
from tui_events import (Event, KeyEvent, RequestCompleted, RequestFailed,
                        ResizeEvent, TimerTick)


logger = logging.getLogger(__name__)

ANIMATION_INTERVAL = 0.2  # 200 miliseconds between busy indicator frames
IDLE_POLL = 0.1           # How often an idle loop checks the terminal size
INPUT_POLL = 0.1          # How often the input thread checks for shutdown

# Globals, be cautious with use
global_exception: Exception = None


def main() -> None:
    """
    Main wraps the platform
    specific implementation
    """
    # main {{{
    args = parse_args()
    configure_logging(args)

    # Configuration problems surface before the terminal goes raw
    cp = read_config(args)
    theme = parse_colors(args, cp)
    keymap = parse_keymap(args, cp)

    if sys.platform == "win32":
        _win_main(args, theme, keymap)
    else:
        _nix_main(args, theme, keymap)
    # }}}


def configure_logging(args: Arguments) -> None:
    """
    The terminal belongs to the interface, so logs
    only ever go to a file and only in debug mode
    """
    # configure_logging {{{
    if args.debug:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )
    else:
        logging.getLogger().addHandler(logging.NullHandler())
    # }}}


def initial_state(args: Arguments) -> InteractionState:
    # initial_state {{{
    state = InteractionState()
    if args.url is not None:
        state.inputs[URL_SLOT].set_value(args.url)
    if args.method is not None:
        state.inputs[METHOD_SLOT].set_value(args.method.upper())
    return state
    # }}}


def _main_loop(driver: any, args: Arguments, theme: Theme,
               keymap: Keymap) -> None:
    """
    Reads keyboard input and forwards it to the update
    thread as KeyEvents. Ends as soon as the update thread
    does, which is how quitting works.
    """
    # _main_loop {{{
    enable_buffer()
    hide_cursor()
    bus = Queue()

    update_thread = threading.Thread(target=update_loop,
                                     args=(bus, theme, args, keymap),
                                     daemon=True)
    update_thread.start()

    try:
        while update_thread.is_alive():
            for key in driver.read_keys(INPUT_POLL):
                bus.put(KeyEvent(key))

        if global_exception is not None:
            driver.read_keys()  # Press any key to continue
    finally:
        show_cursor()
        disable_buffer()
    # }}}


def _win_main(args: Arguments, theme: Theme, keymap: Keymap) -> None:
    # _win_main {{{
    import ansi_win

    driver = ansi_win
    ostate, istate = driver.initialize()

    def signal_trap(sig, frame) -> None:
        """
        Ensures terminal state is restored
        """
        disable_buffer()
        driver.reset(ostate, istate)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_trap)

    try:
        _main_loop(driver, args, theme, keymap)
    finally:
        driver.reset(ostate, istate)
        _report_exception()
    # }}}


def _nix_main(args: Arguments, theme: Theme, keymap: Keymap) -> None:
    # _nix_main {{{
    import ansi_nix

    driver = ansi_nix
    orig_state = driver.initialize()

    def signal_trap(sig, frame) -> None:
        """
        Ensures terminal state is restored
        """
        disable_buffer()
        driver.reset(orig_state)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_trap)
    signal.signal(signal.SIGTERM, signal_trap)

    try:
        _main_loop(driver, args, theme, keymap)
    finally:
        driver.reset(orig_state)
        _report_exception()
    # }}}


def _report_exception() -> None:
    # _report_exception {{{
    if global_exception is None:
        return
    print(global_exception)
    traceback.print_tb(global_exception.__traceback__)
    sys.exit(1)
    # }}}


def handle_event(event: Event, state: InteractionState, keymap: Keymap,
                 dispatcher: Dispatcher,
                 clipboard: Callable[[], str] = read_clipboard,
                 getenv: Callable[[str], Optional[str]] = os.environ.get
                 ) -> tuple[bool, bool, bool]:
    """
    Makes the necessary calls upon receiving an event
    from the bus, returning (updateflag, resizeflag, quitflag).
    """
    # handle_event {{{
    match event:
        case KeyEvent(key=key):
            command = handle_key(state, key, keymap, clipboard, getenv)
            match command:
                case QuitCommand():
                    return (False, False, True)
                case RunCommand(draft=draft):
                    state.latest_seq = dispatcher.submit(draft)
            return (True, False, False)

        case ResizeEvent():
            return (True, True, False)

        case RequestCompleted():
            return (apply_success(state, event), False, False)

        case RequestFailed():
            return (apply_failure(state, event), False, False)

        case TimerTick():
            if not state.busy:
                return (False, False, False)
            advance_animation(state)
            return (True, False, False)

        case _:
            raise TypeError(f"Unknown event {event!r}")
    # }}}


def next_event(bus: Queue, state: InteractionState,
               screen: Optional[Screen] = None,
               sizer: Callable[[], os.terminal_size] = shutil.get_terminal_size
               ) -> Optional[Event]:
    """
    Resizes take priority, then anything on the bus. An idle
    bus produces TimerTicks while a request is pending.
    """
    # next_event {{{
    if screen is not None:
        size = sizer()
        if (size.columns, size.lines) != (screen.columns, screen.lines):
            return ResizeEvent(columns=size.columns, lines=size.lines)

    timeout = ANIMATION_INTERVAL if state.busy else IDLE_POLL
    try:
        return bus.get(timeout=timeout)
    except Empty:
        return TimerTick() if state.busy else None
    # }}}


def event_loop(bus: Queue, state: InteractionState, keymap: Keymap,
               dispatcher: Dispatcher, screen: Optional[Screen] = None,
               clipboard: Callable[[], str] = read_clipboard,
               getenv: Callable[[str], Optional[str]] = os.environ.get,
               sizer: Callable[[], os.terminal_size] = shutil.get_terminal_size
               ) -> None:
    """
    Processes events one at a time in arrival order until a
    quit key arrives, rendering after every change when a
    screen is given.
    """
    # event_loop {{{
    while True:
        event = next_event(bus, state, screen, sizer)
        if event is None:
            continue

        updateflag, resizeflag, quitflag = handle_event(
            event, state, keymap, dispatcher, clipboard, getenv)
        if quitflag:
            logger.info("quit requested")
            return

        if screen is None:
            continue
        if resizeflag:
            screen.columns, screen.lines = event.columns, event.lines
        if updateflag:
            draw(build_frame(state, screen), resizeflag)
    # }}}


def _update_loop(bus: Queue, theme: Theme, args: Arguments,
                 keymap: Keymap) -> None:
    # _update_loop {{{
    # Defaults to 80 columns by 24 lines
    size = shutil.get_terminal_size()
    screen = Screen(
        theme=theme, args=args, keymap=keymap,
        borders=populate_borders(args.border_style),
        columns=size.columns, lines=size.lines
    )
    state = initial_state(args)
    dispatcher = Dispatcher(bus, args.timeout)

    draw(build_frame(state, screen), True)  # Ensure screen is initially cleared
    event_loop(bus, state, keymap, dispatcher, screen)
    # }}}


def update_loop(bus: Queue, theme: Theme, args: Arguments,
                keymap: Keymap) -> None:
    """
    Simple wrapper to ensure global exception is
    set, if needed, from the update thread.
    """
    # update_loop {{{
    try:
        _update_loop(bus, theme, args, keymap)
    except Exception as exception:
        logger.exception("update loop crashed")
        draw_failure(theme, args.color_mode)

        global global_exception
        global_exception = exception
    # }}}


if __name__ == "__main__":
    main()
