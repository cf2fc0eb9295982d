# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""Command-line interface for the SiriDB console."""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from siriconsole import __version__
from siriconsole.console import run_console
from siriconsole.core.config import ConsoleConfig, load_yaml_defaults
from siriconsole.errors import ConfigError, TerminalError

PROG_NAME = "siridb-prompt"

# click reports usage errors with 2; this tool uses 1 for every argument failure
USAGE_EXIT_CODE = 1

# YAML keys that differ from the parameter names
_YAML_ALIASES = {"json": "json_output"}

console = Console(stderr=True)


class ConsoleCommand(click.Command):
    """click Command that exits with 1 on usage errors."""

    def main(self, *args, **kwargs):
        try:
            return super().main(*args, **kwargs)
        except SystemExit as e:
            if e.code == click.UsageError.exit_code:
                sys.exit(USAGE_EXIT_CODE)
            raise


def _load_config_file(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> None:
    """Use the YAML file as default values for all other options."""
    if not value:
        return
    try:
        defaults = load_yaml_defaults(value)
    except ConfigError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e
    ctx.default_map = {
        _YAML_ALIASES.get(key, key): val for key, val in defaults.items()
    }


def _enable_debug_log(config: ConsoleConfig) -> None:
    log_file = config.debug_log_path
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, mode='w')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logging.getLogger('siriconsole').addHandler(file_handler)
    logging.getLogger('siriconsole').setLevel(logging.DEBUG)


@click.command(cls=ConsoleCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(
    __version__, "--version", "-v",
    prog_name=PROG_NAME,
    message="%(prog)s version %(version)s",
)
@click.option(
    "--config", "-c",
    type=click.Path(dir_okay=False),
    is_eager=True,
    expose_value=False,
    callback=_load_config_file,
    help="YAML file with default values for the options below.",
)
@click.option("--dbname", "-d", required=True, help="Database name.")
@click.option(
    "--servers", "-s",
    required=True,
    help="Comma separated list of servers, e.g. host1:9000,[::1]:9001",
)
@click.option("--user", "-u", required=True, help="Database user.")
@click.option(
    "--password", "-p",
    envvar="SIRIDB_PASSWORD",
    help="Password for the user; prompted for when not given.",
)
@click.option(
    "--history",
    type=click.IntRange(0, 65535),
    default=1000,
    show_default=True,
    help="Number of commands to keep in history, 0 disables history.",
)
@click.option(
    "--timeout",
    type=click.IntRange(1, 65535),
    default=60,
    show_default=True,
    help="Query timeout in seconds.",
)
@click.option("--json", "json_output", is_flag=True, help="Show raw JSON output.")
@click.option("--debug", is_flag=True, help="Write debug logging to ~/.siridb-prompt/debug.log.")
def cli(dbname: str, servers: str, user: str, password: Optional[str],
        history: int, timeout: int, json_output: bool, debug: bool):
    """Interactive SiriDB query console.

    \b
    Examples:
        siridb-prompt -u iris -d dbtest -s localhost:9000
        siridb-prompt -c ~/.siridb-prompt/dbtest.yaml --json
    """
    try:
        config = ConsoleConfig.from_options(
            dbname=dbname,
            servers=servers,
            user=user,
            password=password,
            history=history,
            timeout=timeout,
            json_output=json_output,
        )
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {escape(str(e))}", highlight=False)
        sys.exit(1)

    if debug:
        _enable_debug_log(config)

    try:
        code = run_console(config)
    except TerminalError as e:
        console.print(f"[red]Terminal error:[/red] {escape(str(e))}", highlight=False)
        sys.exit(1)
    sys.exit(code)


def main():
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
