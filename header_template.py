from typing import Callable, Optional
import logging
import os
import re


logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"{{(.*?)}}")


def resolve_headers(raw: str,
                    getenv: Callable[[str], Optional[str]] = os.environ.get
                    ) -> dict[str, str]:
    """
    Turns the raw header buffer, one [Header Key]: [Header Value]
    per line, into a mapping with every {{NAME}} placeholder
    replaced by the matching environment variable.
    """
    # resolve_headers {{{
    headers = {}

    for line in raw.splitlines():
        if ":" not in line:
            continue  # Not a header, nothing to send

        key, value = line.split(":", 1)
        key = key.strip()
        if key == "":
            continue

        headers[key] = resolve_value(value.strip(), getenv)

    return headers
    # }}}


def resolve_value(value: str,
                  getenv: Callable[[str], Optional[str]] = os.environ.get
                  ) -> str:
    """
    Replaces anything contained in {{...}}, leaving the
    placeholder untouched when the variable is unset or empty
    """
    # resolve_value {{{
    if "{{" not in value:
        return value

    def _substitute(match: re.Match) -> str:
        name = match.group(1).strip()
        resolved = getenv(name) if name != "" else None
        if not resolved:
            logger.debug("header placeholder %s left unresolved", name)
            return match.group(0)
        return resolved

    return PLACEHOLDER.sub(_substitute, value)
    # }}}
