"""Domain models for module configuration resolution.

Plain dataclasses describe what a single ``configure`` call works with; the
pydantic models describe the orchestrator's wire format.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

DEFAULT_CONFIG_NAME = "default"
DEFAULT_CONFIG_FILE = "config.json"
MANIFEST_FILE = "devicejs.json"


@dataclass(frozen=True)
class ModuleIdentity:
    """Name of the module whose configuration is being resolved."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("module name must be a non-empty string")


@dataclass(frozen=True)
class RemoteSource:
    """Orchestrator job configuration addressed through a Unix socket."""

    socket_path: str
    job_name: str
    config_name: str
    kind: Literal["remote"] = "remote"

    @property
    def request_path(self) -> str:
        return f"/jobConfig/{self.job_name}/{self.config_name}"


@dataclass(frozen=True)
class LocalFileSource:
    """Configuration file sitting in the module's directory."""

    path: str
    kind: Literal["file"] = "file"


ConfigSource = Union[RemoteSource, LocalFileSource]


@dataclass(frozen=True)
class SubstitutionContext:
    """Values that ``${...}`` markers may refer to.

    Args:
        base_directory: Replaces ``${thisdir}``.
        variables: Extra ``${name}`` values supplied by the caller.
        env: Lookup table for ``${env:NAME}``; defaults to ``os.environ``.
    """

    base_directory: str
    variables: Mapping[str, Any] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=lambda: os.environ)

    @classmethod
    def for_directory(cls, directory: str | os.PathLike[str]) -> "SubstitutionContext":
        return cls(base_directory=os.fspath(directory))


# ---------------------------------------------------------------------------
# Orchestrator wire format
# ---------------------------------------------------------------------------


class RemoteConfigEntry(BaseModel):
    """One element of the orchestrator's ``configs`` list."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    data: StrictStr
    name: str | None = None
    job: str | None = None
    encoding: str | None = None
    files: Any = None
    mod_time: str | None = None


class ConfigWriteRequest(BaseModel):
    """Body POSTed to the orchestrator when storing a configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    job: str
    data: str
    encoding: Literal["utf8"] = "utf8"


@dataclass(frozen=True)
class RemoteConfigPayload:
    """A well-formed orchestrator response; ``entry`` is ``configs[0]``."""

    entry: RemoteConfigEntry

    @property
    def data(self) -> str:
        return self.entry.data


@dataclass(frozen=True)
class MalformedPayload:
    """A 200 response whose body does not carry ``configs[0].data``."""

    raw: Any
    reason: str


DecodedPayload = Union[RemoteConfigPayload, MalformedPayload]


def decode_config_response(body: Any) -> DecodedPayload:
    """Classify an orchestrator response body.

    Only the first entry of ``configs`` is validated; the orchestrator stores
    one configuration per job and config name.
    """
    if not isinstance(body, dict):
        return MalformedPayload(raw=body, reason="response body is not a JSON object")
    configs = body.get("configs")
    if not isinstance(configs, list) or not configs:
        return MalformedPayload(raw=body, reason="missing or empty 'configs' list")
    try:
        entry = RemoteConfigEntry.model_validate(configs[0])
    except ValidationError as exc:
        return MalformedPayload(
            raw=body,
            reason=f"first config entry has no string 'data' ({exc.error_count()} error(s))",
        )
    return RemoteConfigPayload(entry=entry)


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_CONFIG_NAME",
    "MANIFEST_FILE",
    "ConfigSource",
    "ConfigWriteRequest",
    "DecodedPayload",
    "LocalFileSource",
    "MalformedPayload",
    "ModuleIdentity",
    "RemoteConfigEntry",
    "RemoteConfigPayload",
    "RemoteSource",
    "SubstitutionContext",
    "decode_config_response",
]
