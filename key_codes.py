from enum import Enum
from typing import Optional


ESC = "\x1b"

# Escape sequences sent by terminals, CSI and SS3 flavours
SEQUENCES = {
    f"{ESC}[A": "up",
    f"{ESC}[B": "down",
    f"{ESC}[C": "right",
    f"{ESC}[D": "left",
    f"{ESC}[H": "home",
    f"{ESC}[F": "end",
    f"{ESC}[Z": "shift+tab",
    f"{ESC}[3~": "delete",
    f"{ESC}OA": "up",
    f"{ESC}OB": "down",
    f"{ESC}OC": "right",
    f"{ESC}OD": "left",
    f"{ESC}OH": "home",
    f"{ESC}OF": "end",
}

SINGLES = {
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    ESC: "escape",
}

NAMED = set(SEQUENCES.values()) | set(SINGLES.values())


class Binding(Enum):
    """
    Logical actions, mapped onto physical keys by
    the [keys] section of the configuration file
    """
    # Binding {{{
    NextView = "next_view"
    PrevView = "prev_view"
    NextTab = "next_tab"
    PrevTab = "prev_tab"
    CursorLeft = "left"
    CursorRight = "right"
    CursorUp = "up"
    CursorDown = "down"
    ScrollLeft = "scroll_left"
    ScrollDown = "scroll_down"
    ScrollUp = "scroll_up"
    ScrollRight = "scroll_right"
    Paste = "paste"
    Run = "run"
    AddToCollection = "add_collection"
    ExtractFromCollection = "extract_collection"
    Quit = "quit"
    # }}}


DEFAULT_KEYS = {
    Binding.NextView: "tab",
    Binding.PrevView: "shift+tab",
    Binding.NextTab: "alt+]",
    Binding.PrevTab: "alt+[",
    Binding.CursorLeft: "left",
    Binding.CursorRight: "right",
    Binding.CursorUp: "up",
    Binding.CursorDown: "down",
    Binding.ScrollLeft: "h",
    Binding.ScrollDown: "j",
    Binding.ScrollUp: "k",
    Binding.ScrollRight: "l",
    Binding.Paste: "ctrl+v",
    Binding.Run: "ctrl+r",
    Binding.AddToCollection: "alt+a",
    Binding.ExtractFromCollection: "alt+e",
    Binding.Quit: "ctrl+c, ctrl+q",
}

HELP = {
    Binding.NextView: "next view",
    Binding.NextTab: "next tab",
    Binding.PrevTab: "prev tab",
    Binding.Run: "run",
    Binding.AddToCollection: "add to collection",
    Binding.ExtractFromCollection: "extract",
    Binding.Quit: "quit",
}


class Keymap:
    """
    Two way mapping between key names and bindings.
    A key name belongs to at most one binding.
    """
    # Keymap {{{
    def __init__(self, keys: Optional[dict] = None) -> None:
        self.bindings: dict[Binding, list[str]] = {}
        self._lookup: dict[str, Binding] = {}

        merged = dict(DEFAULT_KEYS)
        merged.update(keys or {})
        for binding, names in merged.items():
            if isinstance(names, str):
                names = [name.strip() for name in names.split(",")]
            names = [name for name in names if name != ""]
            for name in names:
                if not is_key_name(name):
                    raise ValueError(
                        f"Unknown key {name!r} for {binding.value}")
                self._lookup[name] = binding
            self.bindings[binding] = names

    def lookup(self, key: str) -> Optional[Binding]:
        return self._lookup.get(key)

    def keys_for(self, binding: Binding) -> list[str]:
        return self.bindings.get(binding, [])

    def help_line(self) -> str:
        parts = []
        for binding, text in HELP.items():
            keys = self.keys_for(binding)
            if keys:
                parts.append(f"{keys[0]} {text}")
        return " • ".join(parts)
    # }}}


def is_key_name(name: str) -> bool:
    # is_key_name {{{
    if len(name) == 1 or name in NAMED:
        return True
    if name.startswith("ctrl+"):
        rest = name[len("ctrl+"):]
        return len(rest) == 1 and rest.isalpha()
    if name.startswith("alt+"):
        return len(name) == len("alt+") + 1
    return False
    # }}}


def split_keys(text: str) -> list[str]:
    """
    Splits raw terminal input into the chunks belonging to
    individual key presses. A lone ESC followed by a character
    is treated as alt+character.
    """
    # split_keys {{{
    chunks = []
    index = 0

    while index < len(text):
        char = text[index]
        if char != ESC or index + 1 >= len(text):
            chunks.append(char)
            index += 1
            continue

        follow = text[index + 1]
        if follow == "[" and index + 2 < len(text):
            end = index + 2
            # Parameter bytes then a single final byte
            while end < len(text) and not 0x40 <= ord(text[end]) <= 0x7E:
                end += 1
            chunks.append(text[index:end + 1])
            index = end + 1
        elif follow == "O" and index + 2 < len(text):
            chunks.append(text[index:index + 3])
            index += 3
        else:
            chunks.append(text[index:index + 2])
            index += 2

    return chunks
    # }}}


def decode(chunk: str) -> str:
    """
    Names a single key press chunk produced by split_keys
    """
    # decode {{{
    if chunk in SEQUENCES:
        return SEQUENCES[chunk]
    if chunk in SINGLES:
        return SINGLES[chunk]

    if len(chunk) == 2 and chunk[0] == ESC:
        return f"alt+{decode(chunk[1]) if chunk[1] in SINGLES else chunk[1]}"

    if len(chunk) == 1 and ord(chunk) < 0x20:
        return f"ctrl+{chr(ord(chunk) + 0x60)}"

    return chunk
    # }}}


def decode_all(text: str) -> list[str]:
    # decode_all {{{
    return [decode(chunk) for chunk in split_keys(text)]
    # }}}


def split_incomplete(text: str) -> tuple[str, str]:
    """
    Separates an escape sequence cut short at the end of a read
    from the complete key presses in front of it
    """
    # split_incomplete {{{
    start = text.rfind(ESC)
    if start == -1:
        return (text, "")

    tail = text[start:]
    if tail in (ESC, f"{ESC}O"):
        return (text[:start], tail)
    if tail.startswith(f"{ESC}[") and \
            not any(0x40 <= ord(char) <= 0x7E for char in tail[2:]):
        return (text[:start], tail)
    return (text, "")
    # }}}
