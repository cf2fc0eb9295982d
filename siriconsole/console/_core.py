# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Core console mixin: state, session startup, background tasks and the event loop."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional

import pyperclip

from siriconsole.client.base import DatabaseClient
from siriconsole.console._events import (
    InputMode,
    LogEvent,
    LogViewHandler,
    TimePrecisionEvent,
    ViewMode,
)
from siriconsole.core.config import ConsoleConfig
from siriconsole.errors import ClientError, TerminalError
from siriconsole.execution.query import QueryRunner
from siriconsole.grammar.base import GrammarParser
from siriconsole.prompt.completion import (
    CompletionEngine,
    ExitProvider,
    ImportProvider,
    KeywordProvider,
    list_dir as default_list_dir,
)
from siriconsole.prompt.editor import Prompt
from siriconsole.storage.history import CommandHistory
from siriconsole.terminal.base import (
    KeyEvent,
    MouseEvent,
    ResizeEvent,
    TerminalErrorEvent,
    TerminalIO,
)
from siriconsole.views.log import LogView
from siriconsole.views.output import OutputView
from siriconsole.views.render import QueryRenderer

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "siriconsole"

# Seconds between connection checks of the startup task
CONNECT_POLL_INTERVAL = 1.0

TIME_PRECISION_QUERY = "show time_precision"
TIME_PRECISION_TIMEOUT = 10

# Seconds the message consumer waits before re-checking for shutdown
MESSAGE_POLL_INTERVAL = 0.5

ClientFactory = Callable[[ConsoleConfig], DatabaseClient]


def parse_time_precision(result: Any) -> str:
    """Extract the value of a ``show time_precision`` response.

    Raises:
        ValueError: if the response does not have the expected layout
    """
    if not isinstance(result, dict):
        raise ValueError("missing 'map' in data")
    data = result.get("data")
    if not isinstance(data, list) or len(data) != 1:
        raise ValueError("missing array 'data' or length 1 in map")
    item = data[0]
    value = item.get("value") if isinstance(item, dict) else None
    if not isinstance(value, str):
        raise ValueError("cannot find time_precision in data")
    return value


class _CoreMixin:
    """Core console mixin: owns all state, runs the single event loop."""

    def __init__(
        self,
        config: ConsoleConfig,
        terminal: TerminalIO,
        client_factory: ClientFactory,
        grammar: Optional[GrammarParser] = None,
        clipboard: Callable[[str], None] = pyperclip.copy,
        list_dir: Callable[[str], list[str]] = default_list_dir,
        history: Optional[CommandHistory] = None,
    ):
        if grammar is None:
            from siriconsole.grammar.siri import SiriGrammarParser
            grammar = SiriGrammarParser()

        self.config = config
        self.terminal = terminal
        self.client_factory = client_factory
        self.grammar = grammar
        self.copy_to_clipboard = clipboard

        self.events: "queue.Queue" = queue.Queue()
        self.log_view = LogView()
        self.output = OutputView(QueryRenderer(json_mode=config.json_output))
        self.history = history or CommandHistory(config.history, config.history_path)

        self.completion = CompletionEngine(
            grammar,
            providers=[ExitProvider(), ImportProvider(list_dir), KeywordProvider()],
        )
        self.prompt = Prompt(">>> ", completer=self.completion)
        self.password_prompt = Prompt("Password: ", hidden=True)

        self.view = ViewMode.LOG
        self.input_mode = InputMode.PASSWORD if config.needs_password else InputMode.NORMAL
        self.client: Optional[DatabaseClient] = None
        self.runner: Optional[QueryRunner] = None
        self.time_precision: Optional[str] = None
        self.exit_code: Optional[int] = None

        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self._log_handler = LogViewHandler(self.events)

    # --- Session ---

    def start_session(self) -> None:
        """Load history, connect, and start the background tasks."""
        self.history.load()

        self.client = self.client_factory(self.config)
        self.runner = QueryRunner(self.client, self.grammar, self.config.timeout)

        self._start_thread(self._consume_messages, "message-consumer", self.client)
        try:
            self.client.connect()
        except ClientError as e:
            logger.error("Connect failed: %s", e)
        self._start_thread(self._init_connection, "startup", self.client)

        self.input_mode = InputMode.NORMAL
        if self.client.is_available():
            self.view = ViewMode.OUTPUT

    def set_password(self, password: str) -> None:
        self.config = self.config.model_copy(update={"password": password})

    def exit(self, code: int) -> None:
        self.exit_code = code

    # --- Background tasks (enqueue only) ---

    def _start_thread(self, target: Callable[..., None], name: str, *args) -> None:
        thread = threading.Thread(target=target, name=name, args=args, daemon=True)
        self._threads.append(thread)
        thread.start()

    def _read_terminal(self) -> None:
        while not self._stop.is_set():
            try:
                event = self.terminal.poll_event()
            except Exception as e:
                event = TerminalErrorEvent(e)
            self.events.put(event)
            if isinstance(event, TerminalErrorEvent):
                return

    def _consume_messages(self, client: DatabaseClient) -> None:
        while not self._stop.is_set():
            try:
                message = client.messages.get(timeout=MESSAGE_POLL_INTERVAL)
            except queue.Empty:
                continue
            self.events.put(LogEvent(message))

    def _init_connection(self, client: DatabaseClient) -> None:
        while not client.is_connected():
            if self._stop.wait(CONNECT_POLL_INTERVAL):
                return

        try:
            result = client.query(TIME_PRECISION_QUERY, TIME_PRECISION_TIMEOUT)
            time_precision = parse_time_precision(result)
        except (ClientError, ValueError) as e:
            self.events.put(LogEvent(f"error reading time_precision: {e}", logging.ERROR))
            return
        self.events.put(TimePrecisionEvent(time_precision))

    # --- Event loop ---

    def handle_event(self, event) -> None:
        """Apply one queued event. Only called from the console loop."""
        if isinstance(event, KeyEvent):
            self.handle_key(event)
        elif isinstance(event, MouseEvent):
            self.handle_mouse(event)
        elif isinstance(event, LogEvent):
            self.log_view.log(event.message, event.level, event.when)
        elif isinstance(event, TimePrecisionEvent):
            self.time_precision = event.time_precision
            self.output.set_time_precision(event.time_precision)
            self.log_view.log(f"finished reading time precision: '{event.time_precision}'")
        elif isinstance(event, ResizeEvent):
            pass
        elif isinstance(event, TerminalErrorEvent):
            raise TerminalError(f"terminal event error: {event.error}") from event.error
        else:
            logger.debug("Ignoring unknown event %r", event)

    def _drain(self) -> None:
        while self.exit_code is None:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return
            self.handle_event(event)

    def run(self) -> int:
        """Run until the user quits. Returns the process exit code.

        Raises:
            TerminalError: if the terminal fails; it is restored first
        """
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        if package_logger.level == logging.NOTSET:
            package_logger.setLevel(logging.INFO)
        package_logger.addHandler(self._log_handler)

        try:
            self.terminal.start()
            self._start_thread(self._read_terminal, "terminal-reader")
            if self.input_mode == InputMode.NORMAL:
                self.start_session()
            self._drain()
            self.draw()

            while self.exit_code is None:
                self.handle_event(self.events.get())
                self._drain()
                if self.exit_code is None:
                    self.draw()
        finally:
            self.shutdown()
        return self.exit_code

    def shutdown(self) -> None:
        """Stop background tasks, save history, close the client and restore the terminal."""
        self._stop.set()
        try:
            if self.client is not None:
                self.history.save()
                try:
                    self.client.close()
                except Exception as e:
                    logger.error("Error closing client: %s", e)
            self.terminal.stop()
        finally:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(self._log_handler)
