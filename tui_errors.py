class TuiError(Exception):
    """
    Base for every error the interface recovers from.
    These end up as an inline message, never as a crash.
    """
    # TuiError {{{
    def __str__(self) -> str:
        return self.args[0] if self.args else self.__class__.__name__
    # }}}


class TransportError(TuiError):
    """
    Connection, timeout or protocol failure while
    sending a request. HTTP status codes are not errors.
    """
    # TransportError {{{
    pass
    # }}}


class ParseError(TuiError):
    # ParseError {{{
    pass
    # }}}


class ClipboardError(TuiError):
    # ClipboardError {{{
    pass
    # }}}
