"""Exception hierarchy for devjs-configurator.

Remote read failures are deliberately absent: they only ever trigger the
file fallback and are never raised to callers.
"""

from __future__ import annotations


class ConfiguratorError(Exception):
    """Base class for every error raised by the configurator."""


class IdentityError(ConfiguratorError):
    """Raised when the module name cannot be determined from ``devicejs.json``."""


class FileReadError(ConfiguratorError):
    """Raised when the fallback configuration file cannot be read."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ParseError(ConfiguratorError):
    """Raised when relaxed JSON text cannot be parsed.

    Attributes:
        reason: Description of what went wrong.
        original_text: The text exactly as it was handed to the parser.
    """

    def __init__(self, reason: str, original_text: str) -> None:
        super().__init__(f"Invalid configuration JSON: {reason}")
        self.reason = reason
        self.original_text = original_text


class SubstitutionError(ConfiguratorError):
    """Raised when a parsed value cannot be walked for variable substitution."""


class RemoteWriteError(ConfiguratorError):
    """Raised when pushing configuration to the orchestrator fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "ConfiguratorError",
    "FileReadError",
    "IdentityError",
    "ParseError",
    "RemoteWriteError",
    "SubstitutionError",
]
