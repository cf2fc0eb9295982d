# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Output view: the rendered history of submitted queries."""

from __future__ import annotations

from typing import Optional

from siriconsole.execution.query import Query
from siriconsole.views.render import QueryRenderer
from siriconsole.views.scroll import ScrollBuffer


class OutputView(ScrollBuffer):
    """
    ScrollBuffer built from Query objects.

    Entries are rendered at the current width, so a width change or a
    toggle between human and raw JSON rendering re-renders every query.
    """

    def __init__(self, renderer: Optional[QueryRenderer] = None, width: int = 80, height: int = 24):
        super().__init__(width=width, height=height)
        self.renderer = renderer or QueryRenderer()
        self.queries: list[Query] = []

    @property
    def json_mode(self) -> bool:
        return self.renderer.json_mode

    def set_json_mode(self, enabled: bool) -> None:
        if enabled != self.renderer.json_mode:
            self.renderer.json_mode = enabled
            self.rerender()

    def toggle_mode(self) -> bool:
        self.set_json_mode(not self.renderer.json_mode)
        return self.renderer.json_mode

    def set_time_precision(self, time_precision: str) -> None:
        if time_precision != self.renderer.time_precision:
            self.renderer.time_precision = time_precision
            self.rerender()

    def add(self, query: Query) -> None:
        self.queries.append(query)
        self._append_query(query)

    def _append_query(self, query: Query) -> None:
        for text, style in self.renderer.render(query, self.width):
            self.append(text, style)

    def rerender(self) -> None:
        autoscroll = self.autoscroll
        offset = self.offset
        self._lines = []
        self.rows = []
        for query in self.queries:
            self._append_query(query)
        self.autoscroll = autoscroll
        self.offset = self.max_offset if autoscroll else min(offset, self.max_offset)

    def _rewrap(self) -> None:
        self.rerender()

    def clear(self) -> None:
        super().clear()
        self.queries = []

    @property
    def last_query(self) -> Optional[Query]:
        return self.queries[-1] if self.queries else None

    def last_json(self) -> str:
        """Serialized result of the most recent query.

        Raises:
            LookupError: when there is nothing to copy
        """
        query = self.last_query
        if query is None:
            raise LookupError("nothing to copy")
        if not query.succeeded:
            raise LookupError("last query has no result")
        return query.json()
