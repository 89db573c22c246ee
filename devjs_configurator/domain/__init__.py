"""Domain layer: plain data describing a configuration resolution."""

from .models import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_CONFIG_NAME,
    MANIFEST_FILE,
    ConfigSource,
    ConfigWriteRequest,
    DecodedPayload,
    LocalFileSource,
    MalformedPayload,
    ModuleIdentity,
    RemoteConfigEntry,
    RemoteConfigPayload,
    RemoteSource,
    SubstitutionContext,
    decode_config_response,
)

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
