# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Query pipeline: parse, dispatch with timeout, record the outcome."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from siriconsole.client.base import DatabaseClient
from siriconsole.errors import (
    ClientError,
    GrammarError,
    ImportFileError,
    QueryTimeoutError,
)
from siriconsole.execution.importer import load_import_file
from siriconsole.grammar.base import GrammarParser

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"
IMPORT_COMMAND = "import"


class QueryState(str, Enum):
    CREATED = "created"
    PARSING = "parsing"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


FINAL_STATES = {QueryState.SUCCEEDED, QueryState.FAILED, QueryState.TIMED_OUT}


@dataclass
class Query:
    """A submitted command and its outcome. Frozen once a final state is recorded."""
    raw_text: str
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    parse_position: int = 0
    state: QueryState = QueryState.CREATED
    result: Any = None
    error: Optional[str] = None
    duration: Optional[float] = None

    @property
    def done(self) -> bool:
        return self.state in FINAL_STATES

    @property
    def succeeded(self) -> bool:
        return self.state == QueryState.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.state in (QueryState.FAILED, QueryState.TIMED_OUT)

    def _finish(self, state: QueryState, duration: float) -> None:
        if self.done:
            raise RuntimeError(f"query already {self.state.value}")
        self.state = state
        self.duration = duration

    def record_result(self, result: Any, duration: float) -> None:
        self._finish(QueryState.SUCCEEDED, duration)
        self.result = result

    def record_error(self, error: str, duration: float) -> None:
        self._finish(QueryState.FAILED, duration)
        self.error = error

    def record_timeout(self, error: str, duration: float) -> None:
        self._finish(QueryState.TIMED_OUT, duration)
        self.error = error

    def json(self) -> str:
        """Serialize the result.

        Raises:
            ValueError: if the query did not succeed
        """
        if not self.succeeded:
            raise ValueError("query has no result")
        return json.dumps(self.result, indent=2, sort_keys=True, default=str)


def is_exit_command(text: str) -> bool:
    return text.strip() == EXIT_COMMAND


def import_path(text: str) -> Optional[str]:
    """Return the file argument if ``text`` is an import command, else None."""
    stripped = text.strip()
    if stripped == IMPORT_COMMAND:
        return ""
    if stripped.startswith(IMPORT_COMMAND + " "):
        return stripped[len(IMPORT_COMMAND):].strip()
    return None


class QueryRunner:
    """Runs one command at a time against the database client."""

    def __init__(
        self,
        client: DatabaseClient,
        grammar: GrammarParser,
        timeout: float,
        file_loader: Callable[[str], Any] = load_import_file,
    ):
        self.client = client
        self.grammar = grammar
        self.timeout = timeout
        self.file_loader = file_loader

    def run(self, text: str) -> Query:
        """Parse and dispatch ``text``; always returns a Query in a final state."""
        query = Query(raw_text=text)

        query.state = QueryState.PARSING
        try:
            query.parse_position = self.grammar.parse(text).pos
        except GrammarError as e:
            logger.warning("Grammar parse error: %s", e)

        query.state = QueryState.DISPATCHED
        start = time.monotonic()
        try:
            result = self._dispatch(text)
        except QueryTimeoutError as e:
            query.record_timeout(str(e), time.monotonic() - start)
        except (ClientError, ImportFileError) as e:
            query.record_error(str(e), time.monotonic() - start)
        else:
            query.record_result(result, time.monotonic() - start)

        logger.debug("Query %r finished: %s in %.3fs", text, query.state.value, query.duration)
        return query

    def _dispatch(self, text: str) -> Any:
        path = import_path(text)
        if path is None:
            return self.client.query(text, self.timeout)

        if not path:
            raise ImportFileError("usage: import <file.json|file.csv>")
        data = self.file_loader(path)
        return self.client.insert(data, self.timeout)
