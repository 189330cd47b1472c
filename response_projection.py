from enum import Enum
import logging

from focus_state import (Focus, InteractionState, Snapshot, Tab,
                         sync_focus)
from tui_events import RequestCompleted, RequestFailed


logger = logging.getLogger(__name__)

ANIMATION_FRAMES = 5


class Band(Enum):
    # Band {{{
    Empty = "none"
    Ok = "ok"
    Redirect = "redirect"
    Error = "error"
    # }}}


def status_band(status_code: int) -> Band:
    """
    Colour band of the status indicator, no status
    at all is reported as Band.Empty
    """
    # status_band {{{
    if status_code <= 0:
        return Band.Empty
    if status_code < 300:
        return Band.Ok
    if status_code < 400:
        return Band.Redirect
    return Band.Error
    # }}}


def is_current(state: InteractionState, seq: int) -> bool:
    # is_current {{{
    if seq != state.latest_seq:
        logger.info("dropping outcome of request %d, latest is %d",
                    seq, state.latest_seq)
        return False
    return True
    # }}}


def apply_success(state: InteractionState, event: RequestCompleted) -> bool:
    """
    Projects a received response onto the tabs and moves the
    user over to the response body. Returns False for stale events.
    """
    # apply_success {{{
    if not is_current(state, event.seq):
        return False

    state.busy = False
    state.info = ""
    state.snapshot = Snapshot(
        status_code=event.status_code,
        reason=event.reason,
        body=event.body,
        headers=event.headers,
        latency_ms=event.latency_ms,
    )

    state.tab_content[Tab.ResponseBody] = event.body
    state.tab_content[Tab.ResponseHeaders] = event.headers
    state.tab = Tab.ResponseBody
    state.focus = Focus.Response
    state.viewer.set_content(event.body)

    sync_focus(state)  # Response body is read only, so nothing keeps focus
    return True
    # }}}


def apply_failure(state: InteractionState, event: RequestFailed) -> bool:
    """
    Clears the status and body of the snapshot and shows the
    error. Tab content is left as is and simply re-rendered.
    """
    # apply_failure {{{
    if not is_current(state, event.seq):
        return False

    state.busy = False
    state.snapshot = Snapshot()
    state.report(event.error)

    if state.tab not in state.buffers:
        state.viewer.content = state.content_for(state.tab)
    return True
    # }}}


def advance_animation(state: InteractionState) -> int:
    # advance_animation {{{
    if state.busy:
        state.animation = (state.animation + 1) % ANIMATION_FRAMES
    return state.animation
    # }}}
