"""``get`` command: resolve and print a module's configuration."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console

from devjs_configurator.domain.models import DEFAULT_CONFIG_FILE
from devjs_configurator.errors import ConfiguratorError
from devjs_configurator.interfaces.cli.context import (
    build_configurator,
    parse_config_name_overrides,
)

console = Console()


@click.command(name="get")
@click.argument(
    "directory", type=click.Path(file_okay=False, path_type=str), default="."
)
@click.option("--module", "module_name", help="Module name (default: from devicejs.json).")
@click.option(
    "--file",
    "file_name",
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Fallback configuration file inside DIRECTORY.",
)
@click.option("--socket", "socket_path", help="Orchestrator Unix socket path.")
@click.option(
    "--config-name",
    "config_name_pairs",
    multiple=True,
    metavar="MODULE=VARIANT",
    help="Config variant to request for a module (repeatable).",
)
@click.pass_context
def get(
    ctx: click.Context,
    directory: str,
    module_name: str | None,
    file_name: str,
    socket_path: str | None,
    config_name_pairs: tuple[str, ...],
) -> None:
    """Resolve the configuration of the module in DIRECTORY and print it."""
    configurator = build_configurator(
        ctx,
        socket_path=socket_path,
        config_names=parse_config_name_overrides(config_name_pairs),
    )
    try:
        configuration = asyncio.run(
            configurator.configure(directory, module_name, file_name)
        )
    except ConfiguratorError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print_json(data=configuration)
