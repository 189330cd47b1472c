from dataclasses import dataclass
from typing import Optional, Union

from tui_errors import TuiError


@dataclass(frozen=True)
class KeyEvent:
    # KeyEvent {{{
    key: str  # Decoded key name, such as "a", "enter" or "alt+]"
    # }}}


@dataclass(frozen=True)
class ResizeEvent:
    # ResizeEvent {{{
    columns: int
    lines:   int
    # }}}


@dataclass(frozen=True)
class RequestCompleted:
    """
    Terminal outcome of a request that produced an
    HTTP response, whatever its status code.
    """
    # RequestCompleted {{{
    seq:         int
    status_code: int
    reason:      str
    body:        str
    headers:     str
    latency_ms:  Optional[int] = None
    # }}}


@dataclass(frozen=True)
class RequestFailed:
    # RequestFailed {{{
    seq:   int
    error: TuiError
    # }}}


@dataclass(frozen=True)
class TimerTick:
    # TimerTick {{{
    pass
    # }}}


Event = Union[KeyEvent, ResizeEvent, RequestCompleted,
              RequestFailed, TimerTick]
