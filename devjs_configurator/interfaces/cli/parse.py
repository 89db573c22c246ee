"""``parse`` command: run the relaxed JSON pipeline on a local file."""

from __future__ import annotations

import os

import click
from rich.console import Console

from devjs_configurator.domain.models import SubstitutionContext
from devjs_configurator.errors import ConfiguratorError
from devjs_configurator.parsing import minify, parse_and_substitute_sync

console = Console()


@click.command(name="parse")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option(
    "--thisdir",
    type=click.Path(file_okay=False, path_type=str),
    help="Value of ${thisdir} (default: the file's directory).",
)
@click.option(
    "--minify-only",
    is_flag=True,
    help="Print compact JSON without substituting variables.",
)
def parse(config_file: str, thisdir: str | None, minify_only: bool) -> None:
    """Parse CONFIG_FILE as relaxed JSON, substitute variables and print it."""
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            text = f.read()
        if minify_only:
            click.echo(minify(text))
            return
        base = thisdir or os.path.dirname(os.path.abspath(config_file))
        value = parse_and_substitute_sync(text, SubstitutionContext.for_directory(base))
    except (ConfiguratorError, OSError, UnicodeDecodeError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    console.print_json(data=value)
