# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Drawing mixin: status header, active view and prompt line."""

from __future__ import annotations

from siriconsole.console._events import InputMode, ViewMode
from siriconsole.terminal.base import Style, print_text

HEADER_STYLE = Style(fg="ansiblack", bg="ansiwhite")
STATUS_OK_STYLE = Style(fg="ansigreen", bg="ansiwhite")
STATUS_DOWN_STYLE = Style(fg="ansired", bg="ansiwhite")

LOG_TITLE = " Log (ESC / CTRL+L close log, CTRL+Q quit)"
OUTPUT_TITLE = " Output (CTRL+L view log, CTRL+J copy to clipboard, CTRL+R toggle json, CTRL+Q quit)"


class _DrawMixin:
    """Full redraw of the screen; called once per processed event."""

    def draw(self) -> None:
        terminal = self.terminal
        terminal.clear()
        width, height = terminal.size()

        if self.input_mode == InputMode.PASSWORD:
            self.password_prompt.draw(terminal, 0, 0, width)
            terminal.flush()
            return

        self._draw_header(width)

        if self.view == ViewMode.LOG:
            self.log_view.draw(terminal, 1, width, height - 1)
            terminal.hide_cursor()
        else:
            self.output.draw(terminal, 1, width, height - 2)
            self.prompt.draw(terminal, 0, height - 1, width)
            self.prompt.draw_completions(
                terminal, len(self.prompt.prefix), height - 2, 1, width)

        terminal.flush()

    def status_text(self) -> tuple[str, str, bool]:
        """Header label, connection status and whether the client is available."""
        available = self.client is not None and self.client.is_available()
        status = "OK " if available else "NO CONNECTION "
        return f" <{self.config.user}@{self.config.dbname}> status: ", status, available

    def _draw_header(self, width: int) -> None:
        terminal = self.terminal
        for x in range(width):
            terminal.set_cell(x, 0, " ", HEADER_STYLE)

        if self.view == ViewMode.LOG:
            title = LOG_TITLE
        else:
            title = OUTPUT_TITLE + (" [json]" if self.output.json_mode else "")

        label, status, available = self.status_text()
        start = max(0, width - len(label) - len(status))

        print_text(terminal, 0, 0, title, HEADER_STYLE, max_x=start)
        x = print_text(terminal, start, 0, label, HEADER_STYLE, max_x=width)
        print_text(terminal, x, 0, status,
                   STATUS_OK_STYLE if available else STATUS_DOWN_STYLE, max_x=width)
