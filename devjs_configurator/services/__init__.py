"""Service layer: configuration resolution and storage."""

from .configurator import (
    ModuleConfigurator,
    configure,
    default_client_factory,
    set_module_config,
)

__all__ = [
    "ModuleConfigurator",
    "configure",
    "default_client_factory",
    "set_module_config",
]
