# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Diagnostic log view."""

import logging
from datetime import datetime
from typing import Optional

from siriconsole.terminal.base import DEFAULT_STYLE, Style
from siriconsole.views.scroll import ScrollBuffer

WARNING_STYLE = Style(fg="ansiyellow")
ERROR_STYLE = Style(fg="ansired")


class LogView(ScrollBuffer):
    """ScrollBuffer of timestamped log messages."""

    def log(self, message: str, level: int = logging.INFO, when: Optional[datetime] = None) -> None:
        when = when or datetime.now()
        if level >= logging.ERROR:
            style = ERROR_STYLE
        elif level >= logging.WARNING:
            style = WARNING_STYLE
        else:
            style = DEFAULT_STYLE
        self.append(f"{when:%H:%M:%S} {message}", style)
