"""CLI interface facades for devjs-configurator.

This package is the home for all Click commands. Use the
``devjs_configurator.interfaces.cli`` namespace for imports and module
execution.
"""

from .__main__ import cli
from .get import get
from .parse import parse
from .store import set_config

__all__ = ["cli", "get", "parse", "set_config"]
