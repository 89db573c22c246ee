"""Shared helpers for composing CLI command contexts.

This module centralises turning command-line options into configurator
settings, starting from the environment a module runner provides.
"""

from __future__ import annotations

from typing import Any, Iterable

import click

from devjs_configurator.app.config import ConfiguratorSettings, load_settings
from devjs_configurator.errors import ConfiguratorError
from devjs_configurator.services.configurator import ModuleConfigurator


def parse_config_name_overrides(pairs: Iterable[str]) -> dict[str, str]:
    """Turn ``MODULE=VARIANT`` options into a config name table."""
    overrides: dict[str, str] = {}
    for pair in pairs:
        module, sep, variant = pair.partition("=")
        if not sep or not module.strip() or not variant.strip():
            raise click.BadParameter(
                f"expected MODULE=VARIANT, got {pair!r}", param_hint="--config-name"
            )
        overrides[module.strip()] = variant.strip()
    return overrides


def build_settings(
    settings_path: str | None = None,
    socket_path: str | None = None,
    config_names: dict[str, str] | None = None,
) -> ConfiguratorSettings:
    """Return settings from a file or the environment, with CLI overrides applied."""
    try:
        settings = (
            load_settings(settings_path) if settings_path else ConfiguratorSettings.from_env()
        )
    except (OSError, ValueError, ConfiguratorError) as exc:
        raise click.ClickException(f"Invalid settings: {exc}") from exc

    update: dict[str, Any] = {}
    if socket_path:
        update["socket_path"] = socket_path
    if config_names:
        update["config_names"] = {**settings.config_names, **config_names}
    return settings.model_copy(update=update) if update else settings


def build_configurator(ctx: click.Context, **overrides: Any) -> ModuleConfigurator:
    """Create a configurator from the group's ``--settings`` plus overrides."""
    obj = ctx.obj or {}
    return ModuleConfigurator(build_settings(obj.get("settings_path"), **overrides))


__all__ = ["build_configurator", "build_settings", "parse_config_name_overrides"]
