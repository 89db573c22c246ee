"""``set`` command: push a configuration file to the orchestrator."""

from __future__ import annotations

import asyncio
import os

import click
from rich.console import Console

from devjs_configurator.domain.models import SubstitutionContext
from devjs_configurator.errors import ConfiguratorError
from devjs_configurator.interfaces.cli.context import build_configurator
from devjs_configurator.parsing import parse_and_substitute_sync

console = Console()


@click.command(name="set")
@click.argument("module_name")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option("--socket", "socket_path", help="Orchestrator Unix socket path.")
@click.option("--config-name", help="Config variant to write (default: from settings).")
@click.pass_context
def set_config(
    ctx: click.Context,
    module_name: str,
    config_file: str,
    socket_path: str | None,
    config_name: str | None,
) -> None:
    """Store CONFIG_FILE as the configuration of MODULE_NAME.

    The file may use comments, trailing commas and ``${thisdir}``, which
    expands to the file's directory before the value is sent.
    """
    configurator = build_configurator(ctx, socket_path=socket_path)
    if not configurator.settings.remote_enabled:
        raise click.ClickException(
            "No orchestrator socket configured (use --socket or MAESTRO_UNIX_SOCKET)"
        )
    subst = SubstitutionContext.for_directory(os.path.dirname(os.path.abspath(config_file)))
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            configuration = parse_and_substitute_sync(f.read(), subst)
        asyncio.run(
            configurator.set_module_config(module_name, configuration, config_name)
        )
    except (ConfiguratorError, OSError, UnicodeDecodeError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Stored configuration for {module_name}[/green]")
