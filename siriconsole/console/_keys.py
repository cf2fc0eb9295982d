# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Key dispatch mixin: maps input events to editor, view and history operations."""

from __future__ import annotations

import logging
from typing import Optional

from siriconsole.console._events import InputMode, ViewMode
from siriconsole.execution.query import Query, is_exit_command
from siriconsole.terminal.base import Key, KeyEvent, MouseButton, MouseEvent
from siriconsole.views.scroll import ScrollBuffer

logger = logging.getLogger(__name__)


class _KeyDispatchMixin:
    """Key bindings for the password prompt, the log view and the output view."""

    def handle_key(self, event: KeyEvent) -> None:
        if self.input_mode == InputMode.PASSWORD:
            self._handle_password_key(event)
        elif self.view == ViewMode.LOG:
            self._handle_log_key(event)
        else:
            self._handle_output_key(event)

    def handle_mouse(self, event: MouseEvent) -> None:
        if self.input_mode == InputMode.PASSWORD:
            return
        view = self.active_view()
        if event.button == MouseButton.WHEEL_UP:
            view.up()
        elif event.button == MouseButton.WHEEL_DOWN:
            view.down()

    def active_view(self) -> ScrollBuffer:
        return self.log_view if self.view == ViewMode.LOG else self.output

    def _handle_password_key(self, event: KeyEvent) -> None:
        if event.key in (Key.CTRL_C, Key.CTRL_Q):
            self.exit(1)
        elif event.key == Key.ENTER:
            self.set_password(self.password_prompt.value)
            self.password_prompt.delete_all()
            self.start_session()
        else:
            self.password_prompt.handle_key(event)

    def _handle_log_key(self, event: KeyEvent) -> None:
        key = event.key
        if key == Key.CTRL_Q:
            self.exit(0)
        elif key in (Key.CTRL_L, Key.ESCAPE):
            self.view = ViewMode.OUTPUT
        elif key == Key.UP:
            self.log_view.up()
        elif key == Key.DOWN:
            self.log_view.down()
        elif key == Key.PAGE_UP:
            self.log_view.page_up()
        elif key == Key.PAGE_DOWN:
            self.log_view.page_down()
        elif key == Key.CTRL_K:
            self.log_view.clear()

    def _handle_output_key(self, event: KeyEvent) -> None:
        key = event.key
        if key == Key.CTRL_Q:
            self.exit(0)
        elif key == Key.CTRL_L:
            self.view = ViewMode.LOG
        elif key == Key.CTRL_J:
            self.copy_last_result()
        elif key == Key.CTRL_R:
            mode = "raw JSON" if self.output.toggle_mode() else "human readable"
            logger.info("Output mode: %s", mode)
        elif key == Key.CTRL_K:
            self.output.clear()
        elif key == Key.ENTER:
            self.prompt.clear_completions()
            self.submit()
        elif key == Key.PAGE_UP:
            self.output.page_up()
        elif key == Key.PAGE_DOWN:
            self.output.page_down()
        elif key in (Key.UP, Key.DOWN):
            self._recall(key)
        else:
            self.prompt.handle_key(event)

    def _recall(self, key: Key) -> None:
        # completion navigation wins over history while candidates are shown
        if self.prompt.has_completions():
            self.prompt.handle_key(KeyEvent(key))
            return
        text = self.history.prev() if key == Key.UP else self.history.next()
        self.prompt.set_text(text)
        self.prompt.clear_completions()

    def submit(self) -> Optional[Query]:
        """Send the prompt text. Returns the Query, or None for exit and empty input."""
        text = self.prompt.value.strip()
        if is_exit_command(text):
            self.exit(0)
            return None
        if not text:
            return None

        self.history.insert(text)
        query = self.runner.run(text)
        self.output.add(query)
        self.prompt.delete_all()
        self.prompt.clear_completions()
        return query

    def copy_last_result(self) -> bool:
        try:
            self.copy_to_clipboard(self.output.last_json())
        except (LookupError, RuntimeError, OSError) as e:
            logger.error("cannot copy to clipboard: %s", e)
            return False
        logger.info("successfully copied last result to clipboard")
        return True
