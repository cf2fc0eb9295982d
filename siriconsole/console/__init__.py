# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Full-screen query console."""

from typing import Optional

from siriconsole.console._core import _CoreMixin, parse_time_precision
from siriconsole.console._draw import _DrawMixin
from siriconsole.console._events import (
    InputMode,
    LogEvent,
    LogViewHandler,
    TimePrecisionEvent,
    ViewMode,
)
from siriconsole.console._keys import _KeyDispatchMixin
from siriconsole.core.config import ConsoleConfig
from siriconsole.terminal.base import TerminalIO


class Console(
    _CoreMixin,
    _KeyDispatchMixin,
    _DrawMixin,
):
    """Interactive console: one event loop over terminal input and background events."""


def run_console(config: ConsoleConfig, terminal: Optional[TerminalIO] = None) -> int:
    """Run the console against SiriDB on the real terminal."""
    from siriconsole.client.siridb import SiriDBConnector
    from siriconsole.terminal.screen import PromptToolkitTerminal

    def client_factory(cfg: ConsoleConfig) -> SiriDBConnector:
        return SiriDBConnector(cfg.user, cfg.password or "", cfg.dbname, cfg.servers)

    console = Console(config, terminal or PromptToolkitTerminal(), client_factory)
    return console.run()


__all__ = [
    "Console",
    "InputMode",
    "LogEvent",
    "LogViewHandler",
    "TimePrecisionEvent",
    "ViewMode",
    "parse_time_precision",
    "run_console",
]
