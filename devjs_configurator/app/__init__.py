"""Application wiring: settings shared by the service and the CLI."""

from .config import ConfiguratorSettings, MalformedPayloadPolicy, load_settings

__all__ = ["ConfiguratorSettings", "MalformedPayloadPolicy", "load_settings"]
