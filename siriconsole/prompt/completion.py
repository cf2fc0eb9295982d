# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Context-sensitive completion.

The engine parses the text before the cursor once and hands the result to an
ordered chain of providers. Candidates are returned in discovery order.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol

from siriconsole.errors import GrammarError
from siriconsole.grammar.base import GrammarParser, ParseResult

if TYPE_CHECKING:
    from siriconsole.prompt.editor import Prompt

logger = logging.getLogger(__name__)

EXIT_KEYWORD = "exit"
IMPORT_KEYWORD = "import"


@dataclass(frozen=True)
class Completion:
    """A candidate replacing the ``start_pos`` characters before the cursor."""
    text: str
    display: str
    start_pos: int


@dataclass(frozen=True)
class CompletionContext:
    text: str
    line: str
    parsed: ParseResult

    @property
    def rest(self) -> str:
        """Text after the parse position."""
        return self.text[self.parsed.pos:]

    @property
    def trimmed(self) -> str:
        return self.text.strip()


class CompletionProvider(Protocol):
    def complete(self, ctx: CompletionContext) -> list[Completion]: ...


class ExitProvider:
    """Offer ``exit`` while the line is a strict prefix of it."""

    def complete(self, ctx: CompletionContext) -> list[Completion]:
        typed = ctx.text.lstrip()
        if 0 < len(typed) < len(EXIT_KEYWORD) and EXIT_KEYWORD.startswith(typed):
            return [Completion(EXIT_KEYWORD, EXIT_KEYWORD, len(typed))]
        return []


def list_dir(path: str) -> list[str]:
    return sorted(os.listdir(path))


class ImportProvider:
    """Offer the ``import`` command and, after it, directory entries."""

    def __init__(self, list_dir: Callable[[str], list[str]] = list_dir):
        self.list_dir = list_dir

    def complete(self, ctx: CompletionContext) -> list[Completion]:
        typed = ctx.text.lstrip()
        prefix = IMPORT_KEYWORD + " "

        if not typed.startswith(prefix):
            if typed == typed.rstrip() and IMPORT_KEYWORD.startswith(typed):
                return [Completion(prefix, IMPORT_KEYWORD, len(typed))]
            return []

        fragment = typed[len(prefix):].lstrip()
        rest = ctx.rest
        if rest and fragment.endswith(rest):
            directory = fragment[:len(fragment) - len(rest)]
            partial = rest
        else:
            directory = fragment
            partial = ""

        try:
            entries = self.list_dir(directory or ".")
        except OSError as e:
            logger.warning("Cannot list directory %r: %s", directory or ".", e)
            return []

        return [
            Completion(f"{name} ", name, len(rest))
            for name in entries
            if name.startswith(partial)
        ]


class KeywordProvider:
    """Offer the keywords the grammar expects next."""

    def complete(self, ctx: CompletionContext) -> list[Completion]:
        rest = ctx.rest
        completions = []
        for word in ctx.parsed.keywords():
            if (
                not ctx.line
                or (not rest and ctx.text.endswith(" "))
                or (rest and word.startswith(rest))
            ):
                completions.append(Completion(f"{word} ", word, len(rest)))
        return completions


class CompletionEngine:
    """Turns partial command text into completion candidates.

    Usable directly as a :class:`Prompt` completer.
    """

    def __init__(
        self,
        grammar: GrammarParser,
        providers: Optional[list[CompletionProvider]] = None,
    ):
        self.grammar = grammar
        if providers is None:
            providers = [ExitProvider(), ImportProvider(), KeywordProvider()]
        self.providers = providers

    def complete(self, text: str, line: Optional[str] = None) -> list[Completion]:
        """Complete ``text`` (the part of ``line`` before the cursor)."""
        if line is None:
            line = text
        try:
            parsed = self.grammar.parse(text)
        except GrammarError as e:
            logger.warning("Grammar parse error: %s", e)
            return []

        ctx = CompletionContext(text=text, line=line, parsed=parsed)
        completions: list[Completion] = []
        for provider in self.providers:
            completions.extend(provider.complete(ctx))
        return completions

    def __call__(self, prompt: "Prompt") -> list[Completion]:
        return self.complete(prompt.text_before_cursor(), prompt.value)
