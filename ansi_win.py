from ctypes.wintypes import DWORD
from typing import Optional
import ctypes
import msvcrt
import time

from key_codes import decode_all


# Input Constants
STD_INPUT_HANDLE = -10
ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200

# Output Constants
STD_OUTPUT_HANDLE = -11
ENABLE_PROCESSED_OUTPUT = 0x0001
ENABLE_WRAP_AT_EOL_OUTPUT = 0x0002
ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004

POLL_INTERVAL = 0.01


def initialize() -> (DWORD, DWORD):
    '''
    In certain environments, this function may not
    be needed, such as running PowerShell in Windows
    Terminal. In other situations, such as running
    Windows CMD 'straight', this allows the escape
    characters to function properly.

    Returns (output, input)
    '''
    kernel = ctypes.windll.kernel32
    stdin = kernel.GetStdHandle(STD_INPUT_HANDLE)
    stdout = kernel.GetStdHandle(STD_OUTPUT_HANDLE)
    istate = DWORD()
    ostate = DWORD()
    kernel.GetConsoleMode(stdin, ctypes.byref(istate))
    kernel.GetConsoleMode(stdout, ctypes.byref(ostate))
    kernel.SetConsoleMode(
            stdin,
            ENABLE_VIRTUAL_TERMINAL_INPUT
    )
    kernel.SetConsoleMode(
            stdout,
            ENABLE_PROCESSED_OUTPUT |
            ENABLE_WRAP_AT_EOL_OUTPUT |
            ENABLE_VIRTUAL_TERMINAL_PROCESSING
    )
    return (ostate, istate)


def read_keys(timeout: Optional[float] = None) -> list[str]:
    '''
    Polls the console for up to timeout seconds, then drains
    whatever is buffered so escape sequences stay together.
    '''
    deadline = None if timeout is None else time.monotonic() + timeout
    while not msvcrt.kbhit():
        if deadline is not None and time.monotonic() >= deadline:
            return []
        time.sleep(POLL_INTERVAL)

    raw = ""
    while msvcrt.kbhit():
        raw += msvcrt.getwch()
    return decode_all(raw)


def reset(ostate: DWORD, istate: DWORD) -> None:
    '''
    Though not strictly necessary, this function is used as a
    means to ensure the user's terminal is returned to the
    way it was before using this application.
    '''
    kernel = ctypes.windll.kernel32
    stdin = kernel.GetStdHandle(STD_INPUT_HANDLE)
    stdout = kernel.GetStdHandle(STD_OUTPUT_HANDLE)
    kernel.SetConsoleMode(stdin, istate)
    kernel.SetConsoleMode(stdout, ostate)
