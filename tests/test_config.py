# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Tests for configuration parsing."""

from pathlib import Path

import pytest

from siriconsole.core.config import (
    DEFAULT_PORT,
    ConsoleConfig,
    Server,
    load_yaml_defaults,
    parse_servers,
)
from siriconsole.errors import ConfigError


class TestParseServers:
    """Tests for the --servers syntax."""

    def test_host_only_uses_default_port(self):
        assert parse_servers("localhost") == [Server(host="localhost", port=DEFAULT_PORT)]

    def test_host_and_port(self):
        assert parse_servers("siri1:9001, siri2:9002") == [
            Server(host="siri1", port=9001),
            Server(host="siri2", port=9002),
        ]

    def test_ipv6(self):
        servers = parse_servers("[::1]:9001,[fe80::1]")
        assert servers == [Server(host="::1", port=9001), Server(host="fe80::1")]
        assert str(servers[0]) == "[::1]:9001"

    @pytest.mark.parametrize("value", ["", " , ", "host:abc", "host:0", "host:70000", ":9000", "[::1"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError):
            parse_servers(value)


class TestConsoleConfig:
    """Tests for ConsoleConfig validation and derived paths."""

    def test_from_options(self, tmp_path):
        config = ConsoleConfig.from_options(
            dbname="dbtest",
            servers="localhost:9000",
            user="iris",
            password="siri",
            config_dir=tmp_path,
        )
        assert config.servers == [Server(host="localhost")]
        assert config.history == 1000
        assert config.timeout == 60
        assert not config.json_output
        assert config.history_path == tmp_path / "iris@dbtest.history.1"
        assert not config.needs_password

    def test_default_config_dir(self):
        config = ConsoleConfig.from_options(dbname="db", servers="h", user="u")
        assert config.config_dir == Path.home() / ".siridb-prompt"
        assert config.needs_password

    @pytest.mark.parametrize("field, value", [("history", 70000), ("timeout", 0), ("dbname", "")])
    def test_out_of_range(self, field, value):
        options = {"dbname": "db", "servers": "h", "user": "u", field: value}
        with pytest.raises(ConfigError, match=field):
            ConsoleConfig.from_options(**options)


class TestYamlDefaults:
    """Tests for YAML option defaults."""

    def test_load_with_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SIRI_HOST", "siri.local")
        path = tmp_path / "console.yaml"
        path.write_text(
            "dbname: dbtest\n"
            "servers:\n"
            "  - ${SIRI_HOST}:9000\n"
            "  - backup\n"
            "user: iris\n"
            "json: true\n"
            "some-option: 1\n"
        )
        assert load_yaml_defaults(path) == {
            "dbname": "dbtest",
            "servers": "siri.local:9000,backup",
            "user": "iris",
            "json": True,
            "some_option": 1,
        }

    def test_missing_env_var(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SIRI_UNSET_VAR", raising=False)
        path = tmp_path / "console.yaml"
        path.write_text("password: ${SIRI_UNSET_VAR}\n")
        with pytest.raises(ConfigError, match="SIRI_UNSET_VAR"):
            load_yaml_defaults(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_yaml_defaults(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "console.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_yaml_defaults(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "console.yaml"
        path.write_text("")
        assert load_yaml_defaults(path) == {}

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "console.yaml"
        path.write_bytes(b"dbname: \xff\xfe\x00\n")
        with pytest.raises(ConfigError, match="not UTF-8"):
            load_yaml_defaults(path)
