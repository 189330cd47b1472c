from dataclasses import dataclass, field
from queue import Queue
import itertools
import logging
import threading
import time
import requests

from tui_errors import TransportError
from tui_events import Event, RequestCompleted, RequestFailed


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # Seconds, for the whole request
CHUNK_SIZE = 1024


@dataclass
class RequestDraft():
    """
    The request about to be sent, assembled from
    the input slots and buffers at dispatch time
    """
    # RequestDraft {{{
    url:     str
    method:  str
    headers: dict = field(default_factory=dict)
    body:    str = ""

    def __str__(self) -> str:
        metadata = f"{self.method} {self.url}\n"
        headers = f"{self.headers}\n" if self.headers else ""
        body = f"{self.body}\n" if self.body else ""
        return metadata + headers + body
    # }}}


class Dispatcher:
    """
    Starts one detached worker thread per request. Workers
    post their outcome on the bus tagged with the sequence
    number handed out by submit, nothing is ever cancelled.
    """
    # Dispatcher {{{
    def __init__(self, bus: Queue, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.bus = bus
        self.timeout = timeout
        self._counter = itertools.count(1)

    def submit(self, draft: RequestDraft) -> int:
        seq = next(self._counter)
        thread = threading.Thread(
            target=send_request,
            args=(draft, seq, self.bus, self.timeout),
            daemon=True
        )
        thread.start()
        logger.info("dispatched request %d: %s %s",
                    seq, draft.method, draft.url)
        return seq
    # }}}


class Transfer:
    """
    A single request in flight. Its outcome is posted exactly
    once, by the worker or by the deadline timer, whichever
    gets there first.
    """
    # Transfer {{{
    def __init__(self, seq: int, bus: Queue, timeout: float) -> None:
        self.seq = seq
        self.bus = bus
        self.timeout = timeout
        self._lock = threading.Lock()
        self._settled = False

    @property
    def settled(self) -> bool:
        with self._lock:
            return self._settled

    def settle(self, event: Event) -> bool:
        with self._lock:
            if self._settled:
                return False
            self._settled = True
        self.bus.put(event)
        return True

    def expire(self) -> None:
        error = TransportError(f"Request timed out after {self.timeout:g}s")
        if self.settle(RequestFailed(seq=self.seq, error=error)):
            logger.warning("request %d timed out", self.seq)
    # }}}


def format_headers(headers: dict) -> str:
    # format_headers {{{
    return "".join(f"{key}: {value}\n" for key, value in headers.items())
    # }}}


def _send_request(draft: RequestDraft, transfer: Transfer) -> None:
    # _send_request {{{
    data = draft.body.encode() if draft.body else None

    start = time.perf_counter()
    response = requests.request(
        draft.method.strip().upper(), draft.url.strip(),
        headers=draft.headers, data=data, timeout=transfer.timeout,
        stream=True)

    chunks = []
    with response:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if transfer.settled:
                return  # Deadline passed, the body is of no use anymore
            chunks.append(chunk)
    stop = time.perf_counter()

    body = b"".join(chunks).decode(response.encoding or "utf-8",
                                   errors="replace")
    posted = transfer.settle(RequestCompleted(
        seq=transfer.seq,
        status_code=response.status_code,
        reason=response.reason or "",
        body=body,
        headers=format_headers(response.headers),
        latency_ms=int((stop - start) * 1000)
    ))
    if posted:
        logger.info("request %d finished with %d",
                    transfer.seq, response.status_code)
    # }}}


def send_request(draft: RequestDraft, seq: int, bus: Queue,
                 timeout: float = DEFAULT_TIMEOUT) -> None:
    """
    Primary function that comprises a request thread. The timeout
    bounds the whole request, body included, and every failure is
    posted on the bus as RequestFailed.
    """
    # send_request {{{
    transfer = Transfer(seq, bus, timeout)
    deadline = threading.Timer(timeout, transfer.expire)
    deadline.daemon = True
    deadline.start()

    try:
        _send_request(draft, transfer)
    except requests.Timeout:
        transfer.expire()
    except Exception as exception:
        logger.warning("request %d failed: %s", seq, exception)
        message = str(exception) or exception.__class__.__name__
        transfer.settle(RequestFailed(seq=seq, error=TransportError(message)))
    finally:
        deadline.cancel()
    # }}}
