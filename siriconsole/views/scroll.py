# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Append-only scrollback buffer wrapped to the screen width."""

from __future__ import annotations

from dataclasses import dataclass

from rich.cells import get_character_cell_size

from siriconsole.terminal.base import DEFAULT_STYLE, Style, TerminalIO, print_text

TAB_SIZE = 4


@dataclass(frozen=True)
class Row:
    """One screen row of a wrapped line."""
    text: str
    style: Style = DEFAULT_STYLE


def wrap_line(text: str, width: int) -> list[str]:
    """Split ``text`` into rows of at most ``width`` display columns."""
    text = text.expandtabs(TAB_SIZE)
    if width <= 0 or not text:
        return [text]

    rows: list[str] = []
    current: list[str] = []
    current_width = 0
    for ch in text:
        w = get_character_cell_size(ch)
        if current and current_width + w > width:
            rows.append("".join(current))
            current = []
            current_width = 0
        current.append(ch)
        current_width += w
    rows.append("".join(current))
    return rows


class ScrollBuffer:
    """
    Lines shown through a viewport of ``height`` rows starting at ``offset``.

    ``offset`` always stays within ``[0, max(0, len(rows) - height)]``.
    With ``autoscroll`` set, every append moves the viewport to the bottom;
    scrolling up clears it and reaching the bottom again sets it.
    """

    def __init__(self, width: int = 80, height: int = 24):
        self.width = width
        self.height = height
        self.offset = 0
        self.autoscroll = True
        self._lines: list[tuple[str, Style]] = []
        self.rows: list[Row] = []

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def max_offset(self) -> int:
        return max(0, len(self.rows) - self.height)

    def append(self, line: str, style: Style = DEFAULT_STYLE) -> None:
        for part in line.split("\n"):
            self._lines.append((part, style))
            self.rows.extend(Row(r, style) for r in wrap_line(part, self.width))
        if self.autoscroll:
            self.offset = self.max_offset

    def clear(self) -> None:
        self._lines = []
        self.rows = []
        self.offset = 0
        self.autoscroll = True

    def _rewrap(self) -> None:
        self.rows = [
            Row(r, style)
            for text, style in self._lines
            for r in wrap_line(text, self.width)
        ]

    def resize(self, width: int, height: int) -> None:
        """Adapt to a new viewport; re-wraps when the width changed."""
        height = max(0, height)
        if width != self.width:
            self.width = width
            self._rewrap()
        self.height = height
        if self.autoscroll:
            self.offset = self.max_offset
        else:
            self.offset = min(self.offset, self.max_offset)

    # --- Scrolling ---

    def _scroll(self, delta: int) -> None:
        self.offset = max(0, min(self.max_offset, self.offset + delta))
        self.autoscroll = self.offset >= self.max_offset

    def up(self) -> None:
        self._scroll(-1)

    def down(self) -> None:
        self._scroll(1)

    def page_up(self) -> None:
        self._scroll(-max(1, self.height))

    def page_down(self) -> None:
        self._scroll(max(1, self.height))

    def visible_rows(self) -> list[Row]:
        return self.rows[self.offset:self.offset + self.height]

    def draw(self, terminal: TerminalIO, top: int, width: int, height: int) -> None:
        """Render exactly ``height`` rows starting at screen row ``top``."""
        self.resize(width, height)
        visible = self.visible_rows()
        for i in range(height):
            y = top + i
            x = 0
            if i < len(visible):
                row = visible[i]
                x = print_text(terminal, 0, y, row.text, row.style, max_x=width)
            for col in range(x, width):
                terminal.set_cell(col, y, " ", DEFAULT_STYLE)
