# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Database client collaborator contract."""

from __future__ import annotations

import queue
from typing import Any, Protocol


class DatabaseClient(Protocol):
    """
    Connection to a remote database.

    ``query`` and ``insert`` block until the server answers or ``timeout``
    seconds have passed. Status and log messages are delivered asynchronously
    through ``messages``; the console drains that queue from a background
    thread.
    """

    messages: "queue.Queue[str]"

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def is_connected(self) -> bool:
        """True once at least one connection is established."""
        ...

    def is_available(self) -> bool:
        """True when a connection can currently serve requests."""
        ...

    def query(self, text: str, timeout: float) -> Any:
        """Run a query.

        Raises:
            QueryError: the server rejected or failed the query
            QueryTimeoutError: no response within ``timeout`` seconds
        """
        ...

    def insert(self, data: Any, timeout: float) -> Any:
        """Insert points, same error contract as :meth:`query`."""
        ...
