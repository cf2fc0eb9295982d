# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Command history with cursor based recall, persisted per user@database.

Storage format: one command per line, oldest first, no header.
    ~/.siridb-prompt/<user>@<dbname>.history.1
"""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class CommandHistory:
    """
    Bounded list of past commands.

    ``prev()`` and ``next()`` walk a cursor that is reset past the most
    recent entry after every insert. A capacity of 0 disables history.
    """

    def __init__(self, capacity: int, path: Optional[Path] = None):
        if capacity < 0:
            raise ValueError("history capacity must be >= 0")
        self.capacity = capacity
        self.path = Path(path) if path else None
        self._entries: list[str] = []
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def enabled(self) -> bool:
        return self.capacity > 0

    def insert(self, command: str) -> None:
        """Append ``command``, evicting the oldest entries beyond capacity."""
        if not command or not self.enabled:
            return
        self._entries.append(command)
        if len(self._entries) > self.capacity:
            del self._entries[:len(self._entries) - self.capacity]
        self.reset()

    def reset(self) -> None:
        self._cursor = len(self._entries)

    def prev(self) -> str:
        """Step back; stays on the oldest entry once reached."""
        if not self._entries:
            return ""
        if self._cursor > 0:
            self._cursor -= 1
        return self._entries[self._cursor]

    def next(self) -> str:
        """Step forward; returns an empty line past the most recent entry."""
        if self._cursor < len(self._entries):
            self._cursor += 1
        if self._cursor >= len(self._entries):
            return ""
        return self._entries[self._cursor]

    # --- Persistence ---

    def load(self) -> None:
        """Read the history file. A missing file means an empty history."""
        if self.path is None or not self.enabled:
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                lines = [line.rstrip("\r\n") for line in f]
        except FileNotFoundError:
            logger.debug("No history file at %s", self.path)
            return
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read history file %s: %s", self.path, e)
            return

        self._entries = [line for line in lines if line][-self.capacity:]
        self.reset()
        logger.debug("Loaded %d history entries from %s", len(self._entries), self.path)

    def save(self) -> bool:
        """Write the history file. Failures are logged, never raised."""
        if self.path is None or not self.enabled:
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                for entry in self._entries:
                    f.write(entry + "\n")
        except OSError as e:
            logger.error("Cannot write history file %s: %s", self.path, e)
            return False
        return True
