# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Configuration loading with Pydantic validation and env var substitution."""

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from siriconsole.errors import ConfigError

DEFAULT_PORT = 9000

# Directory holding history files and the debug log
CONFIG_DIR_NAME = ".siridb-prompt"


class Server(BaseModel):
    """A SiriDB server address."""
    model_config = {"frozen": True}

    host: str
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    def as_tuple(self) -> tuple[str, int]:
        return self.host, self.port

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class ConsoleConfig(BaseModel):
    """Root configuration model, built from command line options."""
    model_config = {"extra": "ignore"}

    dbname: str = Field(min_length=1)
    servers: list[Server] = Field(min_length=1)
    user: str = Field(min_length=1)
    password: Optional[str] = None
    history: int = Field(default=1000, ge=0, le=65535)
    timeout: int = Field(default=60, ge=1, le=65535)
    json_output: bool = False
    config_dir: Path = Field(default_factory=lambda: Path.home() / CONFIG_DIR_NAME)

    @property
    def history_path(self) -> Path:
        """History file for this user@database pair."""
        return self.config_dir / f"{self.user}@{self.dbname}.history.1"

    @property
    def debug_log_path(self) -> Path:
        return self.config_dir / "debug.log"

    @property
    def needs_password(self) -> bool:
        return not self.password

    @classmethod
    def from_options(cls, **options) -> "ConsoleConfig":
        """Validate raw CLI option values.

        Raises:
            ConfigError: if servers cannot be parsed or a value is out of range
        """
        servers = options.get("servers")
        if isinstance(servers, str):
            options["servers"] = parse_servers(servers)
        try:
            return cls.model_validate(options)
        except ValidationError as e:
            raise ConfigError(_format_validation_error(e)) from e


def parse_servers(value: str) -> list[Server]:
    """
    Parse a comma separated list of servers.

    Accepted forms per item: ``host``, ``host:port``, ``[ipv6]`` and
    ``[ipv6]:port``. The default port is 9000.

    Raises:
        ConfigError: on an empty list, empty host or invalid port
    """
    servers = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        servers.append(_parse_server(item))

    if not servers:
        raise ConfigError("at least one server is required (syntax: host[:port])")
    return servers


def _parse_server(item: str) -> Server:
    port: Optional[str] = None
    if item.startswith("["):
        end = item.find("]")
        if end == -1:
            raise ConfigError(f"invalid server address: {item!r}")
        host = item[1:end]
        remainder = item[end + 1:]
        if remainder:
            if not remainder.startswith(":"):
                raise ConfigError(f"invalid server address: {item!r}")
            port = remainder[1:]
    elif item.count(":") == 1:
        host, port = item.split(":")
    else:
        # bare hostname or an unbracketed IPv6 address
        host = item

    if not host:
        raise ConfigError(f"missing host in server address: {item!r}")

    if port is None:
        return Server(host=host)

    if not port.isdigit():
        raise ConfigError(f"invalid port in server address: {item!r}")
    try:
        return Server(host=host, port=int(port))
    except ValidationError as e:
        raise ConfigError(f"invalid port in server address: {item!r}") from e


def load_yaml_defaults(path: str | Path) -> dict:
    """
    Load option defaults from a YAML file with env var substitution.

    Keys use the long option names with dashes or underscores,
    e.g. ``dbname``, ``servers``, ``history``, ``json``.

    Raises:
        ConfigError: if the file is missing, invalid YAML or not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw_content = f.read()
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path}: not UTF-8 text: {e.reason}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror or e}") from e

    try:
        substituted = _substitute_env_vars(raw_content)
        data = yaml.safe_load(substituted)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"{path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping of option names")

    defaults = {}
    for key, value in data.items():
        name = str(key).replace("-", "_")
        if name == "servers" and isinstance(value, list):
            value = ",".join(str(v) for v in value)
        defaults[name] = value
    return defaults


def _substitute_env_vars(content: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""
    pattern = re.compile(r'\$\{([^}]+)\}')

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable not set: {var_name}")
        return value

    return pattern.sub(replacer, content)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)
