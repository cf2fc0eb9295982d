# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Grammar collaborator contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class Token:
    """An element the grammar would accept next.

    Only keyword literals carry a usable ``value`` for completion.
    """
    value: str
    is_keyword: bool = False


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing a (possibly partial) command.

    ``pos`` is the offset up to which the text was understood; for a valid
    statement it equals ``len(text)``.
    """
    pos: int
    is_valid: bool
    expecting: list[Token] = field(default_factory=list)

    def keywords(self) -> list[str]:
        return [t.value for t in self.expecting if t.is_keyword]


class GrammarParser(Protocol):
    def parse(self, text: str) -> ParseResult:
        """Parse ``text``.

        Raises:
            GrammarError: if the parser itself fails
        """
        ...
