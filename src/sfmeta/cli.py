from __future__ import annotations

import logging
from typing import Optional, cast

import click
from click import Command

from . import __version__
from .command_members import members_cmd
from .command_types import types_cmd
from .env_loader import load_env_files
from .logging_config import configure_logging

_logger = logging.getLogger(__name__)

# Load .env very early, so SFMETA_* settings are visible to every command
load_env_files(quiet=True)


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.version_option(__version__, "--version", prog_name="sfmeta")
@click.option(
    "-v",
    "--verbose",
    "loglevel",
    flag_value=logging.INFO,
    default=None,
    help="Enable INFO logs.",
)
@click.option(
    "-vv",
    "--very-verbose",
    "loglevel",
    flag_value=logging.DEBUG,
    help="Enable DEBUG logs.",
)
@click.pass_context
def cli(ctx: click.Context, loglevel: Optional[int]) -> None:
    """List Salesforce metadata types and members for an SFDX org alias."""
    configure_logging(loglevel)
    _logger.debug("CLI start, version=%s", __version__)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(cast(Command, types_cmd))
cli.add_command(cast(Command, members_cmd))
