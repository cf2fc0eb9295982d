# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Terminal access: the TerminalIO contract and the prompt_toolkit backend."""

from siriconsole.terminal.base import (
    DEFAULT_STYLE,
    Key,
    KeyEvent,
    MouseButton,
    MouseEvent,
    ResizeEvent,
    Style,
    TerminalErrorEvent,
    TerminalEvent,
    TerminalIO,
    print_text,
)

__all__ = [
    "DEFAULT_STYLE",
    "Key",
    "KeyEvent",
    "MouseButton",
    "MouseEvent",
    "ResizeEvent",
    "Style",
    "TerminalErrorEvent",
    "TerminalEvent",
    "TerminalIO",
    "print_text",
]
