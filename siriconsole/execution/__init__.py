# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Query submission and import support."""

from siriconsole.execution.importer import load_import_file
from siriconsole.execution.query import (
    Query,
    QueryRunner,
    QueryState,
    import_path,
    is_exit_command,
)

__all__ = [
    "Query",
    "QueryRunner",
    "QueryState",
    "import_path",
    "is_exit_command",
    "load_import_file",
]
