from typing import Optional
import codecs
import os
import select
import sys
import termios
import tty

from key_codes import decode_all, split_incomplete


READ_SIZE = 64  # Escape sequences and short bursts arrive together

# Globals, carried between reads
decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
pending = ""


def initialize() -> list:
    """
    This setup function is relavent on unix-like
    systems to ensure the escape codes passed to
    the terminal operate as expected. It returns
    the original state of the terminal,
    applicable to the reset function.
    """
    # initialize {{{
    fileno = sys.stdin.fileno()
    state = termios.tcgetattr(fileno)
    tty.setraw(fileno)
    return state
    # }}}


def read_keys(timeout: Optional[float] = None) -> list[str]:
    """
    Waits up to timeout seconds for input and returns the
    names of the keys pressed, an empty list if none were.
    Characters and escape sequences split across reads are
    carried over to the next call.
    """
    # read_keys {{{
    global pending

    fileno = sys.stdin.fileno()
    ready, _, _ = select.select([fileno], [], [], timeout)
    if not ready:
        return []

    raw = os.read(fileno, READ_SIZE)
    text = pending + decoder.decode(raw)
    pending = ""
    if len(raw) == READ_SIZE:
        # A full read means more is queued, so a cut sequence will complete
        text, pending = split_incomplete(text)
    return decode_all(text)
    # }}}


def reset(original_state: list) -> None:
    """
    This is required because some terminals on unix-like systems
    will not return, by default, to their original state. This
    function is used to address this.
    """
    # reset {{{
    fileno = sys.stdin.fileno()
    termios.tcsetattr(fileno, termios.TCSADRAIN, original_state)
    # }}}
