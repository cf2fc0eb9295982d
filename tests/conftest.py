# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from fakes import FakeClient, FakeClipboard, FakeTerminal
from siriconsole.core.config import ConsoleConfig, Server


@pytest.fixture
def config(tmp_path: Path) -> ConsoleConfig:
    return ConsoleConfig(
        dbname="dbtest",
        servers=[Server(host="localhost")],
        user="iris",
        password="siri",
        config_dir=tmp_path / ".siridb-prompt",
    )


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def terminal() -> FakeTerminal:
    return FakeTerminal()


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()
