# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""DatabaseClient for SiriDB, wrapping the asyncio based siridb-connector.

The connector runs on a private event loop in a daemon thread; blocking
calls from the console are bridged with ``run_coroutine_threadsafe``.
"""

import asyncio
import concurrent.futures
import logging
import queue
import threading
from typing import Any, Optional

from siridb.connector import SiriDBClient

from siriconsole.core.config import Server
from siriconsole.errors import ClientError, ConnectionFailedError, QueryError, QueryTimeoutError

logger = logging.getLogger(__name__)

# Seconds connect() waits for the first connection attempt
CONNECT_WAIT = 10.0

# Extra seconds allowed on top of the query timeout for the loop hand-off
TIMEOUT_GRACE = 1.0

CONNECTOR_LOGGER = "siridb"


class _MessageHandler(logging.Handler):
    """Forward connector log records to the client's message queue."""

    def __init__(self, messages: "queue.Queue[str]"):
        super().__init__(level=logging.INFO)
        self.messages = messages
        self.setFormatter(logging.Formatter("%(levelname)s %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.messages.put_nowait(self.format(record))
        except Exception:
            self.handleError(record)


class SiriDBConnector:
    """Blocking SiriDB client with an asynchronous message stream."""

    def __init__(
        self,
        user: str,
        password: str,
        dbname: str,
        servers: list[Server],
        keepalive: bool = True,
        connect_wait: float = CONNECT_WAIT,
    ):
        self.user = user
        self.dbname = dbname
        self.servers = servers
        self.messages: "queue.Queue[str]" = queue.Queue()

        self._password = password
        self._keepalive = keepalive
        self._connect_wait = connect_wait
        self._client: Optional[SiriDBClient] = None
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="siridb-loop", daemon=True)
        self._handler = _MessageHandler(self.messages)
        self._closed = False

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def _post(self, message: str) -> None:
        self.messages.put_nowait(message)

    def connect(self) -> None:
        """Start connecting; waits for the first attempt up to ``connect_wait`` seconds."""
        logging.getLogger(CONNECTOR_LOGGER).addHandler(self._handler)
        self._thread.start()
        self._post(f"connecting to {', '.join(str(s) for s in self.servers)} as {self.user}@{self.dbname}")

        future = asyncio.run_coroutine_threadsafe(self._connect(), self._loop)
        try:
            future.result(self._connect_wait)
        except (TimeoutError, concurrent.futures.TimeoutError):
            self._post("still connecting, continuing in the background")
        except Exception as e:
            logger.debug("Connect failed", exc_info=True)
            self._post(f"connect failed: {e}")

    async def _connect(self) -> None:
        self._client = SiriDBClient(
            username=self.user,
            password=self._password,
            dbname=self.dbname,
            hostlist=[s.as_tuple() for s in self.servers],
            keepalive=self._keepalive,
        )
        results = await self._client.connect()
        for result in results or ():
            if isinstance(result, Exception):
                self._post(f"connection error: {result}")
        if self._client.connected:
            self._post("connected")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._client is not None:
            self._loop.call_soon_threadsafe(self._client.close)
        if self._thread.is_alive():
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=2.0)
        logging.getLogger(CONNECTOR_LOGGER).removeHandler(self._handler)

    def is_connected(self) -> bool:
        return self._client is not None and bool(self._client.connected)

    def is_available(self) -> bool:
        return not self._closed and self.is_connected()

    def query(self, text: str, timeout: float) -> Any:
        return self._run(lambda client: client.query(text, timeout=timeout), timeout)

    def insert(self, data: Any, timeout: float) -> Any:
        return self._run(lambda client: client.insert(data, timeout=timeout), timeout)

    def _run(self, make_coro, timeout: float) -> Any:
        if self._client is None or self._closed:
            raise ConnectionFailedError("not connected to SiriDB")

        future = asyncio.run_coroutine_threadsafe(make_coro(self._client), self._loop)
        try:
            return future.result(timeout + TIMEOUT_GRACE)
        except (TimeoutError, concurrent.futures.TimeoutError, asyncio.TimeoutError) as e:
            future.cancel()
            raise QueryTimeoutError(timeout) from e
        except ClientError:
            raise
        except Exception as e:
            raise QueryError(str(e) or type(e).__name__) from e
