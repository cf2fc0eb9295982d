# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Internal events, console state and the logging bridge.

Background threads never touch views or settings directly; they put one of
these events on the console queue and the console loop applies it.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ViewMode(str, Enum):
    LOG = "log"
    OUTPUT = "output"


class InputMode(str, Enum):
    PASSWORD = "password"
    NORMAL = "normal"


@dataclass(frozen=True)
class LogEvent:
    message: str
    level: int = logging.INFO
    when: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class TimePrecisionEvent:
    time_precision: str


class LogViewHandler(logging.Handler):
    """Forward log records to the console queue as LogEvents."""

    def __init__(self, events: "queue.Queue", level: int = logging.INFO):
        super().__init__(level=level)
        self.events = events
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.events.put_nowait(LogEvent(
                self.format(record),
                record.levelno,
                datetime.fromtimestamp(record.created),
            ))
        except Exception:
            self.handleError(record)
