"""Shared fixtures for httptabs tests."""

from pathlib import Path
from typing import Optional

import pytest

from focus_state import InteractionState
from key_codes import Keymap
from render import Screen, populate_borders
from tui_config import Arguments, parse_colors


class FakeClipboard:
    def __init__(self, text: str = "",
                 error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


class FakeEnv(dict):
    def __call__(self, name: str) -> Optional[str]:
        return self.get(name)


@pytest.fixture
def keymap() -> Keymap:
    return Keymap()


@pytest.fixture
def state() -> InteractionState:
    return InteractionState()


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def env() -> FakeEnv:
    return FakeEnv()


@pytest.fixture
def screen(keymap: Keymap, tmp_path: Path) -> Screen:
    args = Arguments(config_file=tmp_path / "missing.ini")
    return Screen(theme=parse_colors(args), args=args, keymap=keymap,
                  borders=populate_borders(args.border_style))
