from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse
import json
import logging
import re

from tui_errors import ParseError


logger = logging.getLogger(__name__)

INDENT = 2
METADATA_KEYS = ("name", "scheme", "host", "headers")
KEY_LINE = re.compile(r'^(\s+)"(.*)": ')


@dataclass
class Extracted:
    # Extracted {{{
    key:    str
    method: Optional[str] = None
    url:    Optional[str] = None
    # }}}


def parse_target(url: str) -> tuple[str, str, str]:
    """
    Splits a URL into (scheme, host, path), raising ParseError
    when it can not be used as a request target
    """
    # parse_target {{{
    try:
        parsed = urlparse(url.strip())
    except ValueError as exception:
        raise ParseError(f"Invalid URL {url!r}: {exception}") from exception

    if parsed.scheme == "" or parsed.netloc == "":
        raise ParseError(f"Invalid URL {url!r}: scheme and host required")

    return (parsed.scheme, parsed.netloc, parsed.path or "/")
    # }}}


class Collection:
    """
    Accumulated record of request shapes. Created on the first
    add, it only ever grows: headers merge with later values
    winning and every method -> path entry is added once.
    """
    # Collection {{{
    def __init__(self) -> None:
        self.data: Optional[dict] = None

    @property
    def empty(self) -> bool:
        return self.data is None

    def add(self, url: str, method: str, headers: dict) -> dict:
        # add {{{
        scheme, host, path = parse_target(url)
        method = method.strip().upper()
        if method == "":
            raise ParseError("Method is required to add to the collection")

        if self.data is None:
            self.data = {
                "name": "",
                "scheme": scheme,
                "host": host,
                "headers": {},
            }

        self.data.setdefault("headers", {}).update(headers)
        self.data.setdefault(method, {}).setdefault(path, {})

        logger.info("collection now holds %s %s", method, path)
        return self.data
        # }}}

    def to_text(self) -> str:
        if self.data is None:
            return ""
        return json.dumps(self.data, indent=INDENT)

    def extract(self, text: str, line: int) -> Optional[Extracted]:
        """
        Reads the key on the given line of the collection text. A
        path nested under a method resolves to a full request target.
        """
        # extract {{{
        if text.strip() == "":
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exception:
            raise ParseError(f"Collection is not valid: {exception}") \
                from exception

        lines = text.split("\n")
        if not isinstance(data, dict) or not 0 <= line < len(lines):
            return None

        match = KEY_LINE.match(lines[line])
        if match is None:
            return None

        key = _unquote(match.group(2))
        if len(match.group(1)) != INDENT * 2:
            return Extracted(key=key)

        method = None
        for previous in reversed(lines[:line]):
            outer = KEY_LINE.match(previous)
            if outer is not None and len(outer.group(1)) == INDENT:
                method = _unquote(outer.group(2))
                break

        entries = None
        if method is not None and method not in METADATA_KEYS:
            entries = data.get(method)
        if not isinstance(entries, dict) or key not in entries:
            return Extracted(key=key)

        url = f"{data.get('scheme', 'https')}://{data.get('host', '')}{key}"
        return Extracted(key=key, method=method, url=url)
        # }}}
    # }}}


def _unquote(raw: str) -> str:
    # _unquote {{{
    try:
        return json.loads(f'"{raw}"')
    except json.JSONDecodeError:
        return raw
    # }}}
