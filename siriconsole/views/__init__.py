# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Scrollable views: log and query output."""

from siriconsole.views.log import LogView
from siriconsole.views.output import OutputView
from siriconsole.views.render import QueryRenderer, format_timestamp, result_renderables
from siriconsole.views.scroll import Row, ScrollBuffer, wrap_line

__all__ = [
    "LogView",
    "OutputView",
    "QueryRenderer",
    "Row",
    "ScrollBuffer",
    "format_timestamp",
    "result_renderables",
    "wrap_line",
]
