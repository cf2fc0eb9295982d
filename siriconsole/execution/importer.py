# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Load point data for the import command.

Supported formats:
- JSON: ``{"series name": [[timestamp, value], ...], ...}`` or a list of
  ``{"name": ..., "points": [...]}`` objects, passed through unchanged
- CSV: ``series,timestamp,value`` rows; a header row is skipped
"""

import csv
import json
from pathlib import Path
from typing import Any, Union

from siriconsole.errors import ImportFileError


def load_import_file(path: Union[str, Path]) -> Any:
    """Read insert data from ``path``.

    Raises:
        ImportFileError: if the file cannot be read or has an invalid layout
    """
    path = Path(path).expanduser()
    try:
        with open(path, newline="", encoding="utf-8") as f:
            if path.suffix.lower() == ".csv":
                return _read_csv(f, path)
            data = json.load(f)
    except OSError as e:
        raise ImportFileError(f"cannot read {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise ImportFileError(f"invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ImportFileError(f"{path} is not UTF-8 text: {e.reason}") from e

    if not isinstance(data, (dict, list)) or not data:
        raise ImportFileError(f"{path}: expected a non-empty object or list of series")
    return data


def _read_csv(f, path: Path) -> dict[str, list[list[Any]]]:
    series: dict[str, list[list[Any]]] = {}
    for lineno, row in enumerate(csv.reader(f), start=1):
        if not row or all(not cell.strip() for cell in row):
            continue
        if len(row) != 3:
            raise ImportFileError(f"{path}:{lineno}: expected series,timestamp,value")
        name, ts, value = (cell.strip() for cell in row)
        if not ts.isdigit():
            if lineno == 1:
                continue
            raise ImportFileError(f"{path}:{lineno}: invalid timestamp {ts!r}")
        series.setdefault(name, []).append([int(ts), _parse_value(value)])

    if not series:
        raise ImportFileError(f"{path}: no points found")
    return series


def _parse_value(value: str) -> Any:
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            pass
    return value
