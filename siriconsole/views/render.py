# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Renderers for query results - human readable tables or raw JSON."""

from __future__ import annotations

import io
import json
from datetime import datetime, timezone
from typing import Any, Optional

from rich import box
from rich.console import Console, RenderableType
from rich.table import Table
from rich.text import Text

from siriconsole.execution.query import Query, QueryState
from siriconsole.terminal.base import DEFAULT_STYLE, Style

COMMAND_STYLE = Style(bold=True)
ERROR_STYLE = Style(fg="ansired", bold=True)
FOOTER_STYLE = Style(fg="ansibrightblack")

MIN_RENDER_WIDTH = 20

TIME_PRECISION_FACTORS = {"s": 1, "ms": 10**3, "us": 10**6, "ns": 10**9}

# Keys holding rows when a result also carries "columns" (list statements)
LIST_KEYS = ("series", "servers", "pools", "users", "groups", "shards", "tags")

RenderedLine = tuple[str, Style]


def format_timestamp(ts: Any, time_precision: Optional[str]) -> str:
    """Format a SiriDB timestamp as UTC datetime, or as-is without a known precision."""
    factor = TIME_PRECISION_FACTORS.get(time_precision or "")
    if factor is None or not isinstance(ts, int) or isinstance(ts, bool):
        return str(ts)
    try:
        dt = datetime.fromtimestamp(ts / factor, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return str(ts)
    return dt.strftime("%Y-%m-%d %H:%M:%S") + _fraction(ts, factor)


def _fraction(ts: int, factor: int) -> str:
    if factor == 1:
        return ""
    digits = len(str(factor)) - 1
    return "." + str(ts % factor).zfill(digits)


def _is_points(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(p, list) and len(p) == 2 for p in value
    )


def _cell(value: Any) -> Text:
    if isinstance(value, (dict, list)):
        return Text(json.dumps(value, default=str))
    return Text("" if value is None else str(value))


def _points_table(name: str, points: list, time_precision: Optional[str]) -> Table:
    table = Table(title=name, title_justify="left", box=box.SIMPLE, show_edge=False)
    table.add_column("timestamp")
    table.add_column("value", justify="right")
    for ts, value in points:
        table.add_row(Text(format_timestamp(ts, time_precision)), _cell(value))
    if not points:
        table.caption = "no points"
    return table


def _rows_table(columns: list, rows: list, title: Optional[str] = None) -> Table:
    table = Table(title=title, title_justify="left", box=box.SIMPLE, show_edge=False)
    for col in columns:
        table.add_column(str(col))
    for row in rows:
        if isinstance(row, list):
            table.add_row(*(_cell(v) for v in row))
        else:
            table.add_row(_cell(row))
    return table


def _data_table(data: list[dict]) -> Table:
    columns: list[str] = []
    for item in data:
        for key in item:
            if key not in columns:
                columns.append(key)
    rows = [[item.get(col) for col in columns] for item in data]
    return _rows_table(columns, rows)


def _timeit_table(timeit: list) -> Table:
    table = Table(title="timeit", title_justify="left", box=box.SIMPLE, show_edge=False)
    table.add_column("server")
    table.add_column("time", justify="right")
    for entry in timeit:
        if isinstance(entry, dict):
            table.add_row(_cell(entry.get("server")), _cell(entry.get("time")))
    return table


def result_renderables(result: Any, time_precision: Optional[str] = None) -> list[RenderableType]:
    """Build rich renderables for a SiriDB response."""
    if not isinstance(result, dict):
        return [Text(json.dumps(result, indent=2, default=str))]

    remaining = dict(result)
    out: list[RenderableType] = []
    timeit = remaining.pop("timeit", None)

    for key in ("success_msg", "help"):
        if key in remaining:
            out.append(Text(str(remaining.pop(key))))

    if "calc" in remaining:
        calc = remaining.pop("calc")
        out.append(Text(f"{calc}  ({format_timestamp(calc, time_precision)})"
                        if time_precision else str(calc)))

    data = remaining.get("data")
    if isinstance(data, list) and all(isinstance(d, dict) for d in data):
        remaining.pop("data")
        out.append(_data_table(data))

    columns = remaining.pop("columns", None)
    if columns is not None:
        for key in LIST_KEYS:
            if isinstance(remaining.get(key), list):
                out.append(_rows_table(columns, remaining.pop(key)))

    for key, value in remaining.items():
        if _is_points(value):
            out.append(_points_table(key, value, time_precision))
        elif isinstance(value, (str, int, float, bool)) or value is None:
            out.append(Text(f"{key}: {value}"))
        else:
            out.append(Text(json.dumps({key: value}, indent=2, default=str)))

    if timeit:
        out.append(_timeit_table(timeit))
    if not out:
        out.append(Text("(empty result)"))
    return out


def renderables_to_lines(renderables: list[RenderableType], width: int) -> list[str]:
    """Render to plain text lines at ``width`` columns."""
    console = Console(
        file=io.StringIO(),
        width=max(width, MIN_RENDER_WIDTH),
        color_system=None,
        force_terminal=False,
        markup=False,
        emoji=False,
        highlight=False,
    )
    for renderable in renderables:
        console.print(renderable)
    return [line.rstrip() for line in console.file.getvalue().rstrip("\n").split("\n")]


class QueryRenderer:
    """Renders a Query as styled lines for the output view."""

    def __init__(self, json_mode: bool = False, time_precision: Optional[str] = None):
        self.json_mode = json_mode
        self.time_precision = time_precision

    def render(self, query: Query, width: int) -> list[RenderedLine]:
        lines: list[RenderedLine] = [(f">>> {query.raw_text}", COMMAND_STYLE)]

        if query.failed:
            lines.extend((line, ERROR_STYLE) for line in f"error: {query.error}".split("\n"))
        elif query.state == QueryState.SUCCEEDED:
            lines.extend((line, DEFAULT_STYLE) for line in self.render_result(query.result, width))
        else:
            lines.append(("(pending)", FOOTER_STYLE))

        if query.duration is not None:
            lines.append((f"({query.state.value} in {query.duration:.3f}s)", FOOTER_STYLE))
        lines.append(("", DEFAULT_STYLE))
        return lines

    def render_result(self, result: Any, width: int) -> list[str]:
        if self.json_mode:
            return json.dumps(result, indent=2, sort_keys=True, default=str).split("\n")
        return renderables_to_lines(result_renderables(result, self.time_precision), width)
