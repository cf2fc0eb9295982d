# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Exception hierarchy for the console.

Errors are grouped by how the console reacts to them:
- ClientError: recorded on the Query and shown inline, console stays usable
- GrammarError / ImportFileError: logged or shown inline, never fatal
- TerminalError: fatal, the process exits
- ConfigError: reported by the CLI before the console starts
"""


class ConsoleError(Exception):
    """Base class for all console errors."""


class ConfigError(ConsoleError):
    """Invalid command line or YAML configuration."""


class ClientError(ConsoleError):
    """Raised by a DatabaseClient when a request cannot be completed."""


class QueryError(ClientError):
    """The database rejected or failed a command."""


class QueryTimeoutError(ClientError):
    """A command did not complete within the dispatch timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"query timed out after {timeout:g} seconds")


class ConnectionFailedError(ClientError):
    """No connection to any of the configured servers."""


class GrammarError(ConsoleError):
    """The grammar collaborator failed to parse the text."""


class ImportFileError(ConsoleError):
    """A file passed to the import command cannot be read or parsed."""


class TerminalError(ConsoleError):
    """Terminal initialization or event source failure."""
