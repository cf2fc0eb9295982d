# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Tests for the single line editor."""

import pytest

from siriconsole.prompt.completion import Completion
from siriconsole.prompt.editor import MASK_CHAR, Prompt
from siriconsole.terminal.base import Key, KeyEvent

from fakes import FakeTerminal


def assert_cursor_valid(prompt: Prompt):
    assert 0 <= prompt.cursor <= len(prompt.text)


@pytest.fixture
def prompt():
    return Prompt(">>> ")


class TestEditing:
    """Tests for text editing and cursor movement."""

    def test_insert_advances_cursor(self, prompt):
        prompt.insert("a")
        prompt.insert("b")
        assert prompt.value == "ab"
        assert prompt.cursor == 2

    def test_insert_empty_is_noop(self, prompt):
        prompt.set_text("select")
        prompt.move_cursor(-2)
        prompt.insert("")
        assert prompt.value == "select"
        assert prompt.cursor == 4

    def test_insert_in_middle(self, prompt):
        prompt.set_text("slect")
        prompt.move_home()
        prompt.move_cursor(1)
        prompt.insert("e")
        assert prompt.value == "select"
        assert prompt.cursor == 2

    def test_pasted_newlines_become_spaces(self, prompt):
        prompt.insert("list\nseries")
        assert prompt.value == "list series"

    def test_delete_before_cursor_at_start(self, prompt):
        prompt.set_text("abc")
        prompt.move_home()
        prompt.delete_before_cursor()
        assert prompt.value == "abc"
        assert prompt.cursor == 0

    def test_delete_at_cursor_at_end(self, prompt):
        prompt.set_text("abc")
        prompt.delete_at_cursor()
        assert prompt.value == "abc"
        assert prompt.cursor == 3

    def test_delete_before_and_at_cursor(self, prompt):
        prompt.set_text("abcd")
        prompt.move_cursor(-2)
        prompt.delete_before_cursor()
        assert prompt.value == "acd"
        prompt.delete_at_cursor()
        assert prompt.value == "ad"
        assert prompt.cursor == 1

    def test_delete_all(self, prompt):
        prompt.set_text("abc")
        prompt.delete_all()
        assert prompt.value == ""
        assert prompt.cursor == 0

    def test_move_cursor_is_clamped(self, prompt):
        prompt.set_text("abc")
        prompt.move_cursor(10)
        assert prompt.cursor == 3
        prompt.move_cursor(-10)
        assert prompt.cursor == 0

    def test_cursor_invariant_after_every_mutation(self, prompt):
        operations = [
            lambda: prompt.insert("hello"),
            lambda: prompt.move_cursor(-7),
            lambda: prompt.delete_before_cursor(),
            lambda: prompt.move_end(),
            lambda: prompt.delete_at_cursor(),
            lambda: prompt.move_cursor(3),
            lambda: prompt.delete_before_cursor(),
            lambda: prompt.set_text("x"),
            lambda: prompt.move_home(),
            lambda: prompt.delete_all(),
            lambda: prompt.delete_before_cursor(),
        ]
        for op in operations:
            op()
            assert_cursor_valid(prompt)

    def test_handle_key_maps_editing_keys(self, prompt):
        for ch in "abc":
            assert prompt.handle_key(KeyEvent(Key.CHAR, ch))
        prompt.handle_key(KeyEvent(Key.LEFT))
        prompt.handle_key(KeyEvent(Key.BACKSPACE))
        assert prompt.value == "ac"
        prompt.handle_key(KeyEvent(Key.CTRL_A))
        assert prompt.cursor == 0
        prompt.handle_key(KeyEvent(Key.CTRL_E))
        assert prompt.cursor == 2
        prompt.handle_key(KeyEvent(Key.CTRL_U))
        assert prompt.value == ""

    def test_handle_key_ignores_unknown(self, prompt):
        assert prompt.handle_key(KeyEvent(Key.CTRL_Q)) is False


class TestCompletions:
    """Tests for candidate selection and acceptance."""

    @pytest.fixture
    def prompt(self):
        def completer(p):
            if p.value == "sel":
                return [Completion("select ", "select", 3)]
            if p.value == "":
                return [
                    Completion("list ", "list", 0),
                    Completion("select ", "select", 0),
                    Completion("show ", "show", 0),
                ]
            return []
        return Prompt(">>> ", completer=completer)

    def test_edit_refreshes_completions(self, prompt):
        prompt.insert("sel")
        assert [c.display for c in prompt.completions] == ["select"]
        assert prompt.selected is None

    def test_accept_replaces_start_pos_characters(self, prompt):
        prompt.insert("sel")
        assert prompt.accept_completion()
        assert prompt.value == "select "
        assert prompt.cursor == len("select ")

    def test_accept_without_candidates(self, prompt):
        prompt.insert("xyz")
        assert prompt.accept_completion() is False
        assert prompt.value == "xyz"

    def test_selection_cycles(self, prompt):
        prompt.delete_all()
        prompt.select_next()
        assert prompt.selected == 0
        prompt.select_prev()
        assert prompt.selected == 2
        prompt.select_next()
        assert prompt.selected == 0

    def test_accept_selected(self, prompt):
        prompt.delete_all()
        prompt.handle_key(KeyEvent(Key.DOWN))
        prompt.handle_key(KeyEvent(Key.DOWN))
        prompt.handle_key(KeyEvent(Key.TAB))
        assert prompt.value == "select "

    def test_escape_clears_completions(self, prompt):
        prompt.delete_all()
        prompt.handle_key(KeyEvent(Key.ESCAPE))
        assert not prompt.has_completions()
        assert prompt.selected is None


class TestDraw:
    """Tests for drawing the prompt line."""

    def test_draw_prefix_text_and_cursor(self):
        terminal = FakeTerminal()
        prompt = Prompt(">>> ")
        prompt.set_text("show")
        prompt.draw(terminal, 0, 5, 80)
        assert terminal.row(5) == ">>> show"
        assert terminal.cursor == (8, 5)

    def test_hidden_prompt_masks_text(self):
        terminal = FakeTerminal()
        prompt = Prompt("Password: ", hidden=True)
        prompt.set_text("secret")
        prompt.draw(terminal, 0, 0, 80)
        assert terminal.row(0) == "Password: " + MASK_CHAR * 6

    def test_long_text_scrolls_to_keep_cursor_visible(self):
        terminal = FakeTerminal(width=20)
        prompt = Prompt(">>> ")
        prompt.set_text("x" * 50)
        prompt.draw(terminal, 0, 0, 20)
        x, _ = terminal.cursor
        assert x < 20

    def test_draw_completions_above_bottom(self):
        terminal = FakeTerminal()
        prompt = Prompt(">>> ", completer=lambda p: [Completion("show ", "show", 0)])
        prompt.delete_all()
        prompt.draw_completions(terminal, 4, 22, 1, 80)
        assert terminal.row(22).strip() == "show"
