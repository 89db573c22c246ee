"""Settings for devjs-configurator.

Settings are an immutable snapshot handed to :class:`ModuleConfigurator`.
``from_env`` reads the variables a module runner exports for its children;
``load_settings`` reads the same fields from a relaxed-JSON file.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devjs_configurator.domain.models import DEFAULT_CONFIG_NAME
from devjs_configurator.parsing.relaxed_json import parse_relaxed

SOCKET_ENV_VAR = "MAESTRO_UNIX_SOCKET"
CONFIG_NAMES_ENV_VAR = "MAESTRO_CONFIG_NAMES"
TIMEOUT_ENV_VAR = "DEVJS_CONFIGURATOR_TIMEOUT"
MALFORMED_POLICY_ENV_VAR = "DEVJS_CONFIGURATOR_MALFORMED_POLICY"


class MalformedPayloadPolicy(str, Enum):
    """What to do with a 200 response that has no ``configs[0].data``."""

    PASSTHROUGH = "passthrough"
    FALLBACK = "fallback"


class ConfiguratorSettings(BaseModel):
    """Read-only inputs of a configuration resolution.

    Args:
        socket_path: Unix socket of the orchestrator; ``None`` disables the
            remote lookup entirely.
        config_names: Module name to config variant name overrides.
        request_timeout: Seconds allowed per orchestrator request, ``None``
            for no limit.
        malformed_payload_policy: Handling of well-formed HTTP responses whose
            body lacks ``configs[0].data``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    socket_path: str | None = None
    config_names: dict[str, str] = Field(default_factory=dict)
    request_timeout: float | None = Field(default=None, gt=0)
    malformed_payload_policy: MalformedPayloadPolicy = MalformedPayloadPolicy.PASSTHROUGH

    @property
    def remote_enabled(self) -> bool:
        return bool(self.socket_path)

    def config_name_for(self, module_name: str) -> str:
        """Return the config variant to request for ``module_name``."""
        return self.config_names.get(module_name) or DEFAULT_CONFIG_NAME

    @classmethod
    def from_env(cls, env: Mapping[str, str] = os.environ) -> "ConfiguratorSettings":
        """Build settings from environment variables.

        Raises:
            ValueError: If a variable is set to something unusable.
        """
        values: dict[str, object] = {}

        socket_path = env.get(SOCKET_ENV_VAR, "").strip()
        if socket_path:
            values["socket_path"] = socket_path

        names_raw = env.get(CONFIG_NAMES_ENV_VAR, "").strip()
        if names_raw:
            try:
                names = json.loads(names_raw)
            except json.JSONDecodeError as exc:
                raise ValueError(
                    f"{CONFIG_NAMES_ENV_VAR} must be a JSON object: {exc}"
                ) from exc
            if not isinstance(names, dict):
                raise ValueError(f"{CONFIG_NAMES_ENV_VAR} must be a JSON object")
            values["config_names"] = names

        timeout_raw = env.get(TIMEOUT_ENV_VAR, "").strip()
        if timeout_raw:
            try:
                values["request_timeout"] = float(timeout_raw)
            except ValueError as exc:
                raise ValueError(
                    f"Invalid number for {TIMEOUT_ENV_VAR}: {timeout_raw!r}"
                ) from exc

        policy_raw = env.get(MALFORMED_POLICY_ENV_VAR, "").strip().lower()
        if policy_raw:
            values["malformed_payload_policy"] = policy_raw

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ValueError(f"Invalid configurator settings: {exc}") from exc


def load_settings(path: str | Path) -> ConfiguratorSettings:
    """Load settings from a relaxed-JSON file.

    Raises:
        ParseError: If the file is not relaxed JSON.
        ValueError: If the file content does not describe valid settings.
        OSError: If the file cannot be read.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = parse_relaxed(f.read())
    try:
        return ConfiguratorSettings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configurator settings in {path}: {exc}") from exc


__all__ = [
    "CONFIG_NAMES_ENV_VAR",
    "MALFORMED_POLICY_ENV_VAR",
    "SOCKET_ENV_VAR",
    "TIMEOUT_ENV_VAR",
    "ConfiguratorSettings",
    "MalformedPayloadPolicy",
    "load_settings",
]
