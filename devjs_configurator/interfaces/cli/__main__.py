"""Entry point for running the devjs-configurator CLI.

This module defines a top-level Click group that aggregates the subcommands
defined in the ``devjs_configurator.interfaces.cli`` package. Executing
``python -m devjs_configurator.interfaces.cli`` invokes this group.
"""

import logging

import click

from devjs_configurator.infrastructure.observability import configure_logging

from .get import get
from .parse import parse
from .store import set_config


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="Settings file (default: MAESTRO_* environment variables).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, settings_path: str | None) -> None:
    """Fetch and store module configurations."""
    configure_logging(level=logging.DEBUG if verbose else logging.ERROR)
    ctx.obj = {"settings_path": settings_path}


cli.add_command(get)
cli.add_command(set_config)
cli.add_command(parse)


if __name__ == "__main__":
    cli()
