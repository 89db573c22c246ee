"""
devjs-configurator package initializer.

This package resolves a module's configuration from the orchestrator running
next to it, falling back to the module's own ``config.json``, and stores
configuration back on the orchestrator.

The package exposes a ``__version__`` attribute indicating the installed
version. The version is read from pyproject.toml via importlib.metadata, the
single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("devjs-configurator")
except PackageNotFoundError:
    # Package is not installed (running from source without pip install -e .)
    __version__ = "0.0.0.dev"

from devjs_configurator.app.config import ConfiguratorSettings, MalformedPayloadPolicy
from devjs_configurator.domain.models import SubstitutionContext
from devjs_configurator.errors import (
    ConfiguratorError,
    FileReadError,
    IdentityError,
    ParseError,
    RemoteWriteError,
    SubstitutionError,
)
from devjs_configurator.parsing import (
    minify,
    parse_and_substitute,
    parse_and_substitute_sync,
    parse_relaxed,
    resolve_vars_path,
    substitute,
)
from devjs_configurator.services.configurator import (
    ModuleConfigurator,
    configure,
    set_module_config,
)

__all__: list[str] = [
    "ConfiguratorError",
    "ConfiguratorSettings",
    "FileReadError",
    "IdentityError",
    "MalformedPayloadPolicy",
    "ModuleConfigurator",
    "ParseError",
    "RemoteWriteError",
    "SubstitutionContext",
    "SubstitutionError",
    "__version__",
    "configure",
    "minify",
    "parse_and_substitute",
    "parse_and_substitute_sync",
    "parse_relaxed",
    "resolve_vars_path",
    "set_module_config",
    "substitute",
]
