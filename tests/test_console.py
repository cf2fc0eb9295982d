# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Tests for the console event loop and key bindings."""

import logging
import queue
import threading
from unittest.mock import Mock

import pytest

from fakes import FakeClient, FakeClipboard, FakeGrammar, FakeTerminal, type_text
from siriconsole.console import (
    Console,
    InputMode,
    LogEvent,
    LogViewHandler,
    TimePrecisionEvent,
    ViewMode,
    parse_time_precision,
)
from siriconsole.errors import QueryTimeoutError, TerminalError
from siriconsole.execution.query import QueryState
from siriconsole.terminal.base import (
    Key,
    KeyEvent,
    MouseButton,
    MouseEvent,
    TerminalErrorEvent,
)

VERSION_RESULT = {"data": [{"name": "version", "value": "2.0.51"}]}


def make_console(config, terminal, client, clipboard=None, **kwargs):
    return Console(
        config,
        terminal,
        lambda cfg: client,
        grammar=FakeGrammar(),
        clipboard=clipboard or FakeClipboard(),
        list_dir=lambda path: [],
        **kwargs,
    )


@pytest.fixture
def client():
    return FakeClient({
        "show version": VERSION_RESULT,
        "select * from 'slow'": QueryTimeoutError(1),
    })


@pytest.fixture
def session(config, terminal, client, clipboard):
    """Console with a started session, without the event loop."""
    console = make_console(config, terminal, client, clipboard)
    console.start_session()
    yield console
    console.shutdown()


def press(console, *keys):
    for key in keys:
        console.handle_key(key if isinstance(key, KeyEvent) else KeyEvent(key))


def enter_command(console, text):
    press(console, *type_text(text), Key.ENTER)


class TestRunLoop:
    """Tests for the full event loop with scripted terminal input."""

    def test_exit_with_surrounding_whitespace(self, config, terminal, client):
        terminal.feed(*type_text("  exit "), KeyEvent(Key.ENTER))
        console = make_console(config, terminal, client)
        assert console.run() == 0
        assert console.output.queries == []
        assert terminal.started and terminal.stopped
        assert client.closed

    def test_timeout_then_new_input(self, config, terminal, client):
        terminal.feed(
            *type_text("select * from 'slow'"), KeyEvent(Key.ENTER),
            *type_text("show version"), KeyEvent(Key.ENTER),
            KeyEvent(Key.CTRL_Q),
        )
        console = make_console(config, terminal, client)
        assert console.run() == 0
        states = [q.state for q in console.output.queries]
        assert states == [QueryState.TIMED_OUT, QueryState.SUCCEEDED]
        assert console.output.queries[0].failed
        assert console.history.entries == ["select * from 'slow'", "show version"]

    def test_history_is_saved_on_exit(self, config, terminal, client):
        terminal.feed(*type_text("show version"), KeyEvent(Key.ENTER), KeyEvent(Key.CTRL_Q))
        make_console(config, terminal, client).run()
        assert config.history_path.read_text() == "show version\n"

    def test_password_abort(self, config, terminal, client):
        config = config.model_copy(update={"password": None})
        factory = Mock(return_value=client)
        terminal.feed(*type_text("sec"), KeyEvent(Key.CTRL_C))
        console = Console(config, terminal, factory, grammar=FakeGrammar())
        assert console.run() == 1
        factory.assert_not_called()
        assert not config.history_path.exists()

    def test_password_entry_starts_session(self, config, terminal, client):
        config = config.model_copy(update={"password": None})
        factory = Mock(return_value=client)
        terminal.feed(*type_text("secret"), KeyEvent(Key.ENTER), KeyEvent(Key.CTRL_Q))
        console = Console(config, terminal, factory, grammar=FakeGrammar())
        assert console.run() == 0
        factory.assert_called_once()
        assert factory.call_args[0][0].password == "secret"
        assert console.input_mode == InputMode.NORMAL

    def test_no_connection_starts_in_log_view(self, config, terminal):
        client = FakeClient(connected=False)
        terminal.feed(KeyEvent(Key.CTRL_Q))
        console = make_console(config, terminal, client)
        assert console.run() == 0
        assert console.view == ViewMode.LOG

    def test_terminal_error_restores_terminal(self, config, terminal, client):
        terminal.feed(TerminalErrorEvent(OSError("input closed")))
        console = make_console(config, terminal, client)
        with pytest.raises(TerminalError, match="input closed"):
            console.run()
        assert terminal.stopped
        assert client.closed

    def test_log_handler_is_removed(self, config, terminal, client):
        terminal.feed(KeyEvent(Key.CTRL_Q))
        console = make_console(config, terminal, client)
        console.run()
        assert console._log_handler not in logging.getLogger("siriconsole").handlers


class TestOutputKeys:
    """Tests for key bindings of the output view."""

    def test_submit_runs_query(self, session, client):
        enter_command(session, "show version")
        assert session.output.last_query.result == VERSION_RESULT
        assert session.prompt.value == ""
        assert not session.prompt.has_completions()
        assert ("show version", 60) in client.queries

    def test_empty_submit_is_ignored(self, session, client):
        press(session, *type_text("   "), Key.ENTER)
        assert session.output.queries == []
        assert len(session.history) == 0

    def test_up_recalls_history(self, session):
        enter_command(session, "show version")
        enter_command(session, "list series")
        press(session, Key.UP)
        assert session.prompt.value == "list series"
        press(session, Key.UP)
        assert session.prompt.value == "show version"
        press(session, Key.DOWN, Key.DOWN)
        assert session.prompt.value == ""

    def test_up_cycles_completions_first(self, config, terminal, client):
        console = Console(
            config, terminal, lambda cfg: client,
            grammar=FakeGrammar(keywords=["list", "show"]),
        )
        console.start_session()
        try:
            enter_command(console, "show version")
            console.prompt.delete_all()
            press(console, Key.DOWN)
            assert console.prompt.selected == 0
            assert console.prompt.value == ""
        finally:
            console.shutdown()

    def test_copy_last_result(self, session, clipboard):
        enter_command(session, "show version")
        press(session, Key.CTRL_J)
        assert clipboard.copied == [session.output.last_query.json()]

    def test_copy_without_result_is_logged(self, session, clipboard, caplog):
        with caplog.at_level(logging.ERROR):
            press(session, Key.CTRL_J)
        assert clipboard.copied == []
        assert "cannot copy to clipboard: nothing to copy" in caplog.text

    def test_clipboard_failure_is_logged(self, config, terminal, client, caplog):
        clipboard = FakeClipboard(error=RuntimeError("no clipboard mechanism"))
        console = make_console(config, terminal, client, clipboard)
        console.start_session()
        try:
            enter_command(console, "show version")
            with caplog.at_level(logging.ERROR):
                assert console.copy_last_result() is False
            assert "no clipboard mechanism" in caplog.text
        finally:
            console.shutdown()

    def test_ctrl_r_toggles_raw_json(self, session):
        enter_command(session, "show version")
        press(session, Key.CTRL_R)
        assert session.output.json_mode
        press(session, Key.CTRL_R)
        assert not session.output.json_mode

    def test_ctrl_k_clears_output(self, session):
        enter_command(session, "show version")
        press(session, Key.CTRL_K)
        assert session.output.queries == []

    def test_ctrl_l_toggles_log_view(self, session):
        assert session.view == ViewMode.OUTPUT
        press(session, Key.CTRL_L)
        assert session.view == ViewMode.LOG
        press(session, Key.ESCAPE)
        assert session.view == ViewMode.OUTPUT

    def test_ctrl_q_exits(self, session):
        press(session, Key.CTRL_Q)
        assert session.exit_code == 0

    def test_mouse_wheel_scrolls_active_view(self, session):
        for i in range(30):
            session.log_view.log(f"message {i}")
        session.log_view.resize(80, 10)
        press(session, Key.CTRL_L)
        session.handle_mouse(MouseEvent(MouseButton.WHEEL_UP, 0, 0))
        assert not session.log_view.autoscroll
        session.handle_mouse(MouseEvent(MouseButton.WHEEL_DOWN, 0, 0))
        assert session.log_view.autoscroll


class TestEvents:
    """Tests for background events reaching the views through the queue."""

    def test_log_records_are_queued(self, session):
        handler = LogViewHandler(session.events)
        logger = logging.getLogger("siriconsole.tests")
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        try:
            rows_before = len(session.log_view)
            worker = threading.Thread(target=logger.warning, args=("from a worker",))
            worker.start()
            worker.join()
            assert len(session.log_view) == rows_before

            event = session.events.get(timeout=1)
            while not (isinstance(event, LogEvent) and event.message == "from a worker"):
                event = session.events.get(timeout=1)
            session.handle_event(event)
        finally:
            logger.removeHandler(handler)

        assert session.log_view.rows[-1].text.endswith("from a worker")

    def test_time_precision_event(self, session):
        session.handle_event(TimePrecisionEvent("ms"))
        assert session.time_precision == "ms"
        assert session.output.renderer.time_precision == "ms"
        assert session.log_view.rows[-1].text.endswith("finished reading time precision: 'ms'")

    def test_startup_task_reads_time_precision(self, session):
        event = session.events.get(timeout=5)
        while not isinstance(event, TimePrecisionEvent):
            event = session.events.get(timeout=5)
        assert event.time_precision == "ms"

    def test_client_messages_become_log_events(self, session, client):
        client.messages.put("siridb connection lost")
        event = session.events.get(timeout=5)
        while not (isinstance(event, LogEvent) and event.message == "siridb connection lost"):
            event = session.events.get(timeout=5)

    def test_drain_applies_all_queued_events(self, config, terminal, client):
        console = make_console(config, terminal, client)
        console.events.put(LogEvent("one"))
        console.events.put(LogEvent("two"))
        console._drain()
        with pytest.raises(queue.Empty):
            console.events.get_nowait()
        assert [row.text[-3:] for row in console.log_view.rows] == ["one", "two"]


class TestDraw:
    """Tests for the screen layout."""

    def test_output_layout(self, config, client):
        terminal = FakeTerminal(width=120, height=20)
        console = make_console(config, terminal, client)
        console.start_session()
        try:
            enter_command(console, "show version")
            console.draw()
        finally:
            console.shutdown()
        header = terminal.row(0)
        assert header.startswith(" Output")
        assert header.endswith("<iris@dbtest> status: OK")
        assert terminal.row(1) == ">>> show version"
        assert terminal.row(19) == ">>>"
        assert terminal.cursor == (4, 19)

    def test_log_layout_hides_cursor(self, session, terminal):
        press(session, Key.CTRL_L)
        session.draw()
        assert terminal.row(0).startswith(" Log")
        assert terminal.cursor is None

    def test_no_connection_status(self, config, terminal):
        console = make_console(config, terminal, FakeClient(connected=False))
        console.start_session()
        try:
            console.draw()
        finally:
            console.shutdown()
        assert terminal.row(0).endswith("status: NO CONNECTION")

    def test_password_layout(self, config, terminal, client):
        config = config.model_copy(update={"password": None})
        console = make_console(config, terminal, client)
        press(console, *type_text("abc"))
        console.draw()
        assert terminal.row(0) == "Password: ***"
        assert terminal.row(1) == ""

    def test_status_marker_in_dbname(self, config, client):
        config = config.model_copy(update={"dbname": "db status: x"})
        terminal = FakeTerminal(width=120, height=20)
        console = make_console(config, terminal, client)
        console.start_session()
        try:
            console.draw()
        finally:
            console.shutdown()
        assert terminal.row(0).endswith("<iris@db status: x> status: OK")
        assert console.status_text() == (" <iris@db status: x> status: ", "OK ", True)


class TestSiriGrammarConsole:
    """Tests for the console with the default SiriDB grammar."""

    @pytest.fixture
    def console(self, config, terminal, client, clipboard):
        console = Console(
            config,
            terminal,
            lambda cfg: client,
            clipboard=clipboard,
            list_dir=lambda path: [],
        )
        console.start_session()
        yield console
        console.shutdown()

    def test_typing_offers_keywords(self, console):
        console.handle_event(KeyEvent(Key.CHAR, "s"))
        assert console.prompt.value == "s"
        displays = [c.display for c in console.prompt.completions]
        assert "select" in displays
        assert "show" in displays

    def test_typing_offers_exit(self, console):
        press(console, *type_text("exi"))
        assert "exit" in [c.display for c in console.prompt.completions]

    def test_submit_statement(self, console, client):
        enter_command(console, "show version")
        query = console.output.queries[-1]
        assert query.state == QueryState.SUCCEEDED
        assert "show version" in [text for text, _ in client.queries]


class TestParseTimePrecision:
    """Tests for reading the show time_precision response."""

    def test_value(self):
        assert parse_time_precision({"data": [{"name": "time_precision", "value": "us"}]}) == "us"

    @pytest.mark.parametrize("result, message", [
        ([], "missing 'map'"),
        ({"data": []}, "length 1"),
        ({"data": [{"name": "time_precision"}]}, "cannot find time_precision"),
    ])
    def test_invalid(self, result, message):
        with pytest.raises(ValueError, match=message):
            parse_time_precision(result)
