# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Terminal collaborator contract: cells, styles, keys and input events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Union

from rich.cells import get_character_cell_size


class Key(str, Enum):
    """Keys the console reacts to. Printable input arrives as CHAR."""
    CHAR = "char"
    ENTER = "enter"
    ESCAPE = "escape"
    TAB = "tab"
    BACKSPACE = "backspace"
    DELETE = "delete"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    PAGE_UP = "pageup"
    PAGE_DOWN = "pagedown"
    CTRL_A = "c-a"
    CTRL_C = "c-c"
    CTRL_E = "c-e"
    CTRL_J = "c-j"
    CTRL_K = "c-k"
    CTRL_L = "c-l"
    CTRL_Q = "c-q"
    CTRL_R = "c-r"
    CTRL_U = "c-u"
    PASTE = "paste"


class MouseButton(str, Enum):
    WHEEL_UP = "wheel-up"
    WHEEL_DOWN = "wheel-down"
    OTHER = "other"


@dataclass(frozen=True)
class Style:
    """Cell attributes. Colors are ANSI names such as ``ansired``; empty means default."""
    fg: str = ""
    bg: str = ""
    bold: bool = False
    reverse: bool = False


DEFAULT_STYLE = Style()


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    char: str = ""


@dataclass(frozen=True)
class MouseEvent:
    button: MouseButton
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class TerminalErrorEvent:
    error: BaseException


TerminalEvent = Union[KeyEvent, MouseEvent, ResizeEvent, TerminalErrorEvent]


class TerminalIO(Protocol):
    """Cell-level terminal access.

    ``poll_event`` blocks until the next input event and is called from a
    dedicated reader thread; every other method is only called from the
    console loop.
    """

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def size(self) -> tuple[int, int]:
        """Return ``(width, height)`` in cells."""
        ...

    def clear(self) -> None: ...

    def set_cell(self, x: int, y: int, ch: str, style: Style = DEFAULT_STYLE) -> None: ...

    def set_cursor(self, x: int, y: int) -> None: ...

    def hide_cursor(self) -> None: ...

    def flush(self) -> None: ...

    def poll_event(self) -> TerminalEvent: ...


def print_text(
    terminal: TerminalIO,
    x: int,
    y: int,
    text: str,
    style: Style = DEFAULT_STYLE,
    max_x: Optional[int] = None,
) -> int:
    """Write ``text`` starting at ``x``, advancing by display width.

    Returns the column after the last written character.
    """
    for ch in text:
        w = get_character_cell_size(ch)
        if max_x is not None and x + w > max_x:
            break
        terminal.set_cell(x, y, ch, style)
        x += w
    return x
