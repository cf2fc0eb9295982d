# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Full-screen terminal backend on top of prompt_toolkit's low level input/output."""

from __future__ import annotations

import logging
import select
from collections import deque
from typing import Optional

from prompt_toolkit.input import create_input
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import ColorDepth, create_output
from prompt_toolkit.styles import DEFAULT_ATTRS
from rich.cells import get_character_cell_size

from siriconsole.errors import TerminalError
from siriconsole.terminal.base import (
    DEFAULT_STYLE,
    Key,
    KeyEvent,
    MouseButton,
    MouseEvent,
    ResizeEvent,
    Style,
    TerminalErrorEvent,
    TerminalEvent,
)

logger = logging.getLogger(__name__)

# Seconds between checks for a lone escape key and a changed window size
POLL_INTERVAL = 0.1

_KEY_MAP = {
    Keys.ControlM: Key.ENTER,
    Keys.ControlI: Key.TAB,
    Keys.Escape: Key.ESCAPE,
    Keys.ControlH: Key.BACKSPACE,
    Keys.Delete: Key.DELETE,
    Keys.Left: Key.LEFT,
    Keys.Right: Key.RIGHT,
    Keys.Up: Key.UP,
    Keys.Down: Key.DOWN,
    Keys.Home: Key.HOME,
    Keys.End: Key.END,
    Keys.PageUp: Key.PAGE_UP,
    Keys.PageDown: Key.PAGE_DOWN,
    Keys.ControlA: Key.CTRL_A,
    Keys.ControlC: Key.CTRL_C,
    Keys.ControlE: Key.CTRL_E,
    Keys.ControlJ: Key.CTRL_J,
    Keys.ControlK: Key.CTRL_K,
    Keys.ControlL: Key.CTRL_L,
    Keys.ControlQ: Key.CTRL_Q,
    Keys.ControlR: Key.CTRL_R,
    Keys.ControlU: Key.CTRL_U,
}

_IGNORED_KEYS = {Keys.CPRResponse, Keys.Ignore}


class PromptToolkitTerminal:
    """
    TerminalIO implementation writing a cell grid to the alternate screen.

    The grid is rebuilt on every ``clear`` and written row by row on ``flush``.
    Wide glyphs occupy two cells; the second one is stored as ``None``.
    """

    def __init__(self, input=None, output=None, color_depth: ColorDepth = ColorDepth.DEPTH_8_BIT):
        self._input = input
        self._output = output
        self._color_depth = color_depth
        self._raw_mode = None
        self._grid: list[list[Optional[tuple[str, Style]]]] = []
        self._width = 0
        self._height = 0
        self._cursor: Optional[tuple[int, int]] = None
        self._pending: deque[TerminalEvent] = deque()
        self._last_size: Optional[tuple[int, int]] = None
        self._started = False

    def start(self) -> None:
        """Enter raw mode and the alternate screen.

        Raises:
            TerminalError: if the terminal cannot be initialized
        """
        try:
            if self._input is None:
                self._input = create_input()
            if self._output is None:
                self._output = create_output()
            self._raw_mode = self._input.raw_mode()
            self._raw_mode.__enter__()
            self._output.enter_alternate_screen()
            self._output.enable_mouse_support()
            self._output.enable_bracketed_paste()
            self._output.hide_cursor()
            self._output.flush()
        except Exception as e:
            raise TerminalError(f"cannot initialize terminal: {e}") from e
        self._started = True
        self._last_size = self.size()
        self.clear()

    def stop(self) -> None:
        """Restore the terminal. Safe to call more than once."""
        if not self._started:
            return
        self._started = False
        try:
            self._output.reset_attributes()
            self._output.disable_bracketed_paste()
            self._output.disable_mouse_support()
            self._output.show_cursor()
            self._output.quit_alternate_screen()
            self._output.flush()
        finally:
            if self._raw_mode is not None:
                self._raw_mode.__exit__(None, None, None)
                self._raw_mode = None

    def size(self) -> tuple[int, int]:
        size = self._output.get_size()
        return size.columns, size.rows

    def clear(self) -> None:
        self._width, self._height = self.size()
        self._grid = [
            [(" ", DEFAULT_STYLE) for _ in range(self._width)]
            for _ in range(self._height)
        ]
        self._cursor = None

    def set_cell(self, x: int, y: int, ch: str, style: Style = DEFAULT_STYLE) -> None:
        if not (0 <= y < self._height and 0 <= x < self._width):
            return
        w = get_character_cell_size(ch)
        if w == 0:
            return
        if x + w > self._width:
            return
        row = self._grid[y]
        row[x] = (ch, style)
        if w == 2:
            row[x + 1] = None

    def set_cursor(self, x: int, y: int) -> None:
        self._cursor = (x, y)

    def hide_cursor(self) -> None:
        self._cursor = None

    def flush(self) -> None:
        out = self._output
        out.hide_cursor()
        for y, row in enumerate(self._grid):
            out.cursor_goto(y + 1, 1)
            current: Optional[Style] = None
            for cell in row:
                if cell is None:
                    continue
                ch, style = cell
                if style != current:
                    out.set_attributes(_to_attrs(style), self._color_depth)
                    current = style
                out.write(ch)
            out.reset_attributes()
        if self._cursor is not None:
            x, y = self._cursor
            out.cursor_goto(y + 1, x + 1)
            out.show_cursor()
        out.flush()

    def poll_event(self) -> TerminalEvent:
        """Block until the next key, mouse, resize or error event."""
        while not self._pending:
            try:
                ready, _, _ = select.select([self._input.fileno()], [], [], POLL_INTERVAL)
            except (OSError, ValueError) as e:
                return TerminalErrorEvent(e)

            if ready:
                presses = self._input.read_keys()
            else:
                presses = self._input.flush_keys()
                size = self.size()
                if size != self._last_size:
                    self._last_size = size
                    self._pending.append(ResizeEvent(*size))

            for press in presses:
                event = _translate(press.key, press.data)
                if event is not None:
                    self._pending.append(event)

        return self._pending.popleft()


def _to_attrs(style: Style):
    return DEFAULT_ATTRS._replace(
        color=style.fg,
        bgcolor=style.bg,
        bold=style.bold,
        reverse=style.reverse,
    )


def _translate(key, data: str) -> Optional[TerminalEvent]:
    """Convert a prompt_toolkit key press into a console event."""
    if key in _KEY_MAP:
        return KeyEvent(_KEY_MAP[key])
    if key == Keys.Vt100MouseEvent:
        return parse_mouse(data)
    if key == Keys.ScrollUp:
        return MouseEvent(MouseButton.WHEEL_UP)
    if key == Keys.ScrollDown:
        return MouseEvent(MouseButton.WHEEL_DOWN)
    if key == Keys.BracketedPaste:
        return KeyEvent(Key.PASTE, data)
    if key in _IGNORED_KEYS or isinstance(key, Keys):
        return None
    if len(key) == 1 and key.isprintable():
        return KeyEvent(Key.CHAR, key)
    return None


def parse_mouse(data: str) -> Optional[MouseEvent]:
    """Decode an SGR, urxvt or X10 mouse report."""
    try:
        if data.startswith("\x1b[<"):
            code, x, y = (int(p) for p in data[3:-1].split(";"))
            x, y = x - 1, y - 1
        elif data.startswith("\x1b[M") and len(data) >= 6:
            code = ord(data[3]) - 32
            x, y = ord(data[4]) - 33, ord(data[5]) - 33
        elif data.startswith("\x1b["):
            code, x, y = (int(p) for p in data[2:-1].split(";"))
            code, x, y = code - 32, x - 1, y - 1
        else:
            return None
    except ValueError:
        logger.debug("Unparseable mouse report: %r", data)
        return None

    if code & 64:
        button = MouseButton.WHEEL_DOWN if code & 1 else MouseButton.WHEEL_UP
    else:
        button = MouseButton.OTHER
    return MouseEvent(button, x, y)
