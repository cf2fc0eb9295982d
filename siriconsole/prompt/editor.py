# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Single line text editor with completion support."""

from __future__ import annotations

from typing import Callable, Optional

from rich.cells import get_character_cell_size

from siriconsole.prompt.completion import Completion
from siriconsole.terminal.base import (
    DEFAULT_STYLE,
    Key,
    KeyEvent,
    Style,
    TerminalIO,
    print_text,
)

MASK_CHAR = "*"

# Maximum number of completion candidates shown at once
MAX_VISIBLE_COMPLETIONS = 10

PROMPT_STYLE = Style(bold=True)
COMPLETION_STYLE = Style(fg="ansiblack", bg="ansiwhite")
SELECTED_COMPLETION_STYLE = Style(fg="ansiwhite", bg="ansiblue", bold=True)

Completer = Callable[["Prompt"], list[Completion]]


class Prompt:
    """
    Editable line of characters with a cursor.

    Every edit or cursor move asks the completer for fresh candidates and
    clears the selection. While candidates are shown, Up/Down cycle through
    them and Tab accepts one.
    """

    def __init__(
        self,
        prefix: str,
        style: Style = PROMPT_STYLE,
        hidden: bool = False,
        completer: Optional[Completer] = None,
    ):
        self.prefix = prefix
        self.style = style
        self.hidden = hidden
        self.completer = completer
        self.text: list[str] = []
        self.cursor = 0
        self.completions: list[Completion] = []
        self.selected: Optional[int] = None

    @property
    def value(self) -> str:
        return "".join(self.text)

    def text_before_cursor(self) -> str:
        return "".join(self.text[:self.cursor])

    def _changed(self) -> None:
        self.selected = None
        self.completions = self.completer(self) if self.completer else []

    # --- Editing ---

    def insert(self, chars: str) -> None:
        """Insert one character, or a pasted string, at the cursor."""
        for ch in chars:
            if ch in "\r\n":
                ch = " "
            self.text.insert(self.cursor, ch)
            self.cursor += 1
        self._changed()

    def delete_before_cursor(self) -> None:
        if self.cursor > 0:
            del self.text[self.cursor - 1]
            self.cursor -= 1
        self._changed()

    def delete_at_cursor(self) -> None:
        if self.cursor < len(self.text):
            del self.text[self.cursor]
        self._changed()

    def delete_all(self) -> None:
        self.text = []
        self.cursor = 0
        self._changed()

    def set_text(self, text: str) -> None:
        self.text = list(text)
        self.cursor = len(self.text)
        self._changed()

    def move_cursor(self, delta: int) -> None:
        self.cursor = max(0, min(len(self.text), self.cursor + delta))
        self._changed()

    def move_home(self) -> None:
        self.move_cursor(-self.cursor)

    def move_end(self) -> None:
        self.move_cursor(len(self.text) - self.cursor)

    # --- Completions ---

    def has_completions(self) -> bool:
        return bool(self.completions)

    def clear_completions(self) -> None:
        self.completions = []
        self.selected = None

    def select_next(self) -> None:
        if not self.completions:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = (self.selected + 1) % len(self.completions)

    def select_prev(self) -> None:
        if not self.completions:
            return
        if self.selected is None:
            self.selected = len(self.completions) - 1
        else:
            self.selected = (self.selected - 1) % len(self.completions)

    def accept_completion(self) -> bool:
        """Replace the text the selected (or first) candidate covers.

        Returns False when there is nothing to accept.
        """
        if not self.completions:
            return False
        compl = self.completions[self.selected or 0]
        start = max(0, self.cursor - compl.start_pos)
        self.text[start:self.cursor] = list(compl.text)
        self.cursor = start + len(compl.text)
        self._changed()
        return True

    def handle_key(self, event: KeyEvent) -> bool:
        """Apply an editing key. Returns False for keys the editor ignores."""
        key = event.key
        if key in (Key.CHAR, Key.PASTE):
            self.insert(event.char)
        elif key == Key.BACKSPACE:
            self.delete_before_cursor()
        elif key == Key.DELETE:
            self.delete_at_cursor()
        elif key == Key.LEFT:
            self.move_cursor(-1)
        elif key == Key.RIGHT:
            self.move_cursor(1)
        elif key in (Key.HOME, Key.CTRL_A):
            self.move_home()
        elif key in (Key.END, Key.CTRL_E):
            self.move_end()
        elif key == Key.CTRL_U:
            self.delete_all()
        elif key == Key.TAB:
            self.accept_completion()
        elif key == Key.UP:
            self.select_prev()
        elif key == Key.DOWN:
            self.select_next()
        elif key == Key.ESCAPE:
            self.clear_completions()
        else:
            return False
        return True

    # --- Drawing ---

    def _display_chars(self) -> list[str]:
        if self.hidden:
            return [MASK_CHAR] * len(self.text)
        return self.text

    def draw(self, terminal: TerminalIO, x: int, y: int, width: int) -> None:
        """Draw prefix and text on row ``y``, scrolling so the cursor stays visible."""
        x = print_text(terminal, x, y, self.prefix, self.style, max_x=width)
        avail = width - x
        if avail <= 0:
            return

        chars = self._display_chars()
        widths = [get_character_cell_size(ch) for ch in chars]

        # first visible character: keep the cursor inside the line
        start = 0
        while start < self.cursor and sum(widths[start:self.cursor]) > avail - 1:
            start += 1

        col = x
        for ch, w in zip(chars[start:], widths[start:]):
            if col + w > width:
                break
            terminal.set_cell(col, y, ch, DEFAULT_STYLE)
            col += w

        terminal.set_cursor(x + sum(widths[start:self.cursor]), y)

    def draw_completions(self, terminal: TerminalIO, x: int, bottom: int, top: int, width: int) -> None:
        """Draw the candidate list upwards from row ``bottom`` to at most ``top``."""
        if not self.completions:
            return
        rows = min(MAX_VISIBLE_COMPLETIONS, bottom - top + 1, len(self.completions))
        if rows <= 0:
            return

        first = 0
        if self.selected is not None and self.selected >= rows:
            first = self.selected - rows + 1
        visible = self.completions[first:first + rows]

        box_width = min(width - x, max(len(c.display) for c in visible) + 2)
        for i, compl in enumerate(visible):
            y = bottom - rows + 1 + i
            style = SELECTED_COMPLETION_STYLE if first + i == self.selected else COMPLETION_STYLE
            label = f" {compl.display} ".ljust(box_width)
            print_text(terminal, x, y, label, style, max_x=x + box_width)
