# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Line editor and completion engine."""

from siriconsole.prompt.completion import (
    Completion,
    CompletionEngine,
    ExitProvider,
    ImportProvider,
    KeywordProvider,
)
from siriconsole.prompt.editor import Prompt

__all__ = [
    "Completion",
    "CompletionEngine",
    "ExitProvider",
    "ImportProvider",
    "KeywordProvider",
    "Prompt",
]
