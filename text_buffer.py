from typing import Optional
import re


TAB_WIDTH = 4
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def printable(text: str, keep_newlines: bool = False) -> str:
    """
    Strips carriage returns and every other control character,
    tabs become spaces. Newlines survive only when asked to.
    """
    # printable {{{
    text = text.replace("\t", " " * TAB_WIDTH)
    if not keep_newlines:
        return CONTROL_CHARS.sub("", text)
    return "\n".join(CONTROL_CHARS.sub("", line)
                     for line in text.split("\n"))
    # }}}


def _clamp(value: int, low: int, high: int) -> int:
    # _clamp {{{
    return max(low, min(value, high))
    # }}}


class LineInput:
    """
    Single line editable field. It owns its cursor, which
    always sits within [0, len(value)].
    """
    # LineInput {{{
    def __init__(self, value: str = "", char_limit: Optional[int] = None,
                 label: str = "") -> None:
        self.label = label
        self.char_limit = char_limit
        self.focused = False
        self._value = ""
        self.cursor = 0
        self.set_value(value)

    @property
    def value(self) -> str:
        return self._value

    def set_value(self, value: str) -> None:
        value = printable(value)
        if self.char_limit is not None:
            value = value[:self.char_limit]
        self._value = value
        self.cursor = len(value)

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def set_cursor(self, position: int) -> int:
        self.cursor = _clamp(position, 0, len(self._value))
        return self.cursor

    def move_cursor(self, delta: int) -> int:
        return self.set_cursor(self.cursor + delta)

    def cursor_end(self) -> int:
        return self.set_cursor(len(self._value))

    def insert(self, text: str) -> int:
        """
        Splices text in at the cursor, returning how many
        characters made it in after the character limit
        """
        # insert {{{
        text = printable(text)
        if self.char_limit is not None:
            text = text[:max(0, self.char_limit - len(self._value))]

        self._value = self._value[:self.cursor] + text + \
            self._value[self.cursor:]
        self.cursor += len(text)
        return len(text)
        # }}}

    def backspace(self) -> None:
        if self.cursor == 0:
            return
        self._value = self._value[:self.cursor - 1] + \
            self._value[self.cursor:]
        self.cursor -= 1
    # }}}


class TextArea:
    """
    Multi line editable buffer with a (row, column) cursor.
    The column is clamped to the width of the current line.
    """
    # TextArea {{{
    def __init__(self, value: str = "") -> None:
        self.focused = False
        self.lines = [""]
        self.row = 0
        self.col = 0
        self.set_value(value)

    @property
    def value(self) -> str:
        return "\n".join(self.lines)

    def set_value(self, value: str) -> None:
        self.lines = printable(value, keep_newlines=True).split("\n")
        self.row = len(self.lines) - 1
        self.col = len(self.lines[self.row])

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def current_line(self) -> str:
        return self.lines[self.row]

    def line_width(self) -> int:
        return len(self.lines[self.row])

    def set_column(self, column: int) -> int:
        self.col = _clamp(column, 0, self.line_width())
        return self.col

    def move_column(self, delta: int) -> int:
        return self.set_column(self.col + delta)

    def move_row(self, delta: int) -> int:
        self.row = _clamp(self.row + delta, 0, len(self.lines) - 1)
        self.set_column(self.col)
        return self.row

    def cursor_end_of_line(self) -> int:
        return self.set_column(self.line_width())

    def insert(self, text: str) -> None:
        # insert {{{
        chunks = printable(text, keep_newlines=True).split("\n")
        line = self.current_line()
        head, tail = line[:self.col], line[self.col:]

        if len(chunks) == 1:
            self.lines[self.row] = head + chunks[0] + tail
            self.col += len(chunks[0])
            return

        inserted = [head + chunks[0]] + chunks[1:-1] + [chunks[-1] + tail]
        self.lines[self.row:self.row + 1] = inserted
        self.row += len(chunks) - 1
        self.col = len(chunks[-1])
        # }}}

    def newline(self) -> None:
        self.insert("\n")

    def backspace(self) -> None:
        # backspace {{{
        if self.col > 0:
            line = self.current_line()
            self.lines[self.row] = line[:self.col - 1] + line[self.col:]
            self.col -= 1
        elif self.row > 0:
            previous = self.lines[self.row - 1]
            self.lines[self.row - 1] = previous + self.current_line()
            del self.lines[self.row]
            self.row -= 1
            self.col = len(previous)
        # }}}
    # }}}
