"""Module configuration resolution.

A module asks for its configuration with :meth:`ModuleConfigurator.configure`.
The orchestrator is asked first; if it is not configured, unreachable,
answers with an error status or hands back data that does not parse, the
module's own ``config.json`` is read instead. Orchestrator trouble is only
ever logged. Problems with the file are raised, since nothing comes after it.

Example usage:
    configurator = ModuleConfigurator.from_env()
    config = await configurator.configure("/opt/modules/thermostat")

    # Test usage with a fake orchestrator:
    configurator = ModuleConfigurator(
        ConfiguratorSettings(socket_path="/tmp/maestroapi.sock"),
        client_factory=lambda settings: OrchestratorClient(
            settings.socket_path, transport=httpx.MockTransport(handler)
        ),
    )
"""

from __future__ import annotations

import json
import os
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from devjs_configurator.app.config import (
    SOCKET_ENV_VAR,
    ConfiguratorSettings,
    MalformedPayloadPolicy,
)
from devjs_configurator.domain.models import (
    DEFAULT_CONFIG_FILE,
    MANIFEST_FILE,
    ConfigWriteRequest,
    LocalFileSource,
    MalformedPayload,
    ModuleIdentity,
    RemoteSource,
    SubstitutionContext,
)
from devjs_configurator.errors import (
    FileReadError,
    IdentityError,
    ParseError,
    RemoteWriteError,
    SubstitutionError,
)
from devjs_configurator.infrastructure.filesystem import read_text_file
from devjs_configurator.infrastructure.http import OrchestratorClient
from devjs_configurator.infrastructure.observability import (
    get_logger,
    log_context,
    log_exception,
)
from devjs_configurator.parsing import parse_and_substitute, parse_relaxed

ClientFactory = Callable[[ConfiguratorSettings], OrchestratorClient]
FileReader = Callable[[str], Awaitable[str]]

# Returned by the remote step when the file has to be consulted.
_FALLBACK = object()


def default_client_factory(settings: ConfiguratorSettings) -> OrchestratorClient:
    """Build an orchestrator client for the configured Unix socket."""
    if not settings.socket_path:
        raise ValueError("settings do not name an orchestrator socket")
    return OrchestratorClient(settings.socket_path, timeout=settings.request_timeout)


class ModuleConfigurator:
    """Resolves and stores module configurations.

    Each call is self-contained: nothing is cached between calls and the
    settings snapshot is never modified, so one instance can serve
    concurrent callers.
    """

    def __init__(
        self,
        settings: ConfiguratorSettings | None = None,
        *,
        client_factory: ClientFactory = default_client_factory,
        read_file: FileReader = read_text_file,
    ) -> None:
        """Initialize the configurator.

        Args:
            settings: Orchestrator location and config name table. The
                default has no socket, so only files are used.
            client_factory: Builds the orchestrator client for one call.
            read_file: Coroutine function returning a file's text.
        """
        self.settings = settings or ConfiguratorSettings()
        self._client_factory = client_factory
        self._read_file = read_file
        self._logger = get_logger(self.__class__.__module__)

    @classmethod
    def from_env(cls, env: Mapping[str, str] = os.environ) -> "ModuleConfigurator":
        """Create a configurator from the runner's environment variables."""
        return cls(ConfiguratorSettings.from_env(env))

    # -------------------- identity --------------------
    async def resolve_identity(
        self, directory: str, module_name: str | None = None
    ) -> ModuleIdentity:
        """Return the module identity, reading ``devicejs.json`` if needed.

        Raises:
            IdentityError: If no name was given and the manifest is missing,
                unreadable or has no ``name``.
        """
        if module_name:
            return ModuleIdentity(module_name)

        manifest_path = os.path.join(directory, MANIFEST_FILE)
        self._logger.info("No module name given, reading %s", manifest_path)
        try:
            manifest = parse_relaxed(await self._read_file(manifest_path))
        except (OSError, UnicodeDecodeError, ParseError) as exc:
            log_exception(self._logger, f"Unable to read {manifest_path}", exc)
            raise IdentityError(
                f"Could not gather module name from {MANIFEST_FILE} ({manifest_path})"
            ) from exc

        name = manifest.get("name") if isinstance(manifest, dict) else None
        if not isinstance(name, str) or not name:
            self._logger.error("%s has no 'name' field", manifest_path)
            raise IdentityError(
                f"Could not gather module name from {MANIFEST_FILE} ({manifest_path})"
            )
        self._logger.info("Module name is '%s'", name)
        return ModuleIdentity(name)

    # -------------------- read path --------------------
    async def configure(
        self,
        directory: str | os.PathLike[str],
        module_name: str | None = None,
        file_name: str = DEFAULT_CONFIG_FILE,
    ) -> Any:
        """Resolve the configuration of a module.

        Args:
            directory: The module's directory. It holds ``devicejs.json`` and
                the fallback file, and is what ``${thisdir}`` expands to.
            module_name: Module (orchestrator job) name. Read from
                ``devicejs.json`` when omitted.
            file_name: Fallback file inside ``directory``.

        Returns:
            The parsed and substituted configuration.

        Raises:
            IdentityError: If the module name cannot be determined.
            FileReadError: If the orchestrator gave nothing usable and the
                fallback file cannot be read.
            ParseError: If the fallback file is not relaxed JSON.
            SubstitutionError: If the fallback file's value cannot be
                substituted.
        """
        directory = os.fspath(directory)
        identity = await self.resolve_identity(directory, module_name)
        config_name = self.settings.config_name_for(identity.name)
        if identity.name not in self.settings.config_names:
            self._logger.info(
                "No config name provided for %s, using '%s'", identity.name, config_name
            )
        ctx = SubstitutionContext.for_directory(directory)

        with log_context(module=identity.name, config_name=config_name):
            configuration = await self._attempt_remote(identity, config_name, ctx)
            if configuration is not _FALLBACK:
                return configuration
            source = LocalFileSource(
                path=os.path.abspath(os.path.join(directory, file_name))
            )
            return await self._attempt_file(source, ctx)

    async def _attempt_remote(
        self, identity: ModuleIdentity, config_name: str, ctx: SubstitutionContext
    ) -> Any:
        if not self.settings.remote_enabled:
            self._logger.warning(
                "No %s defined, not run by the orchestrator or its settings are missing",
                SOCKET_ENV_VAR,
            )
            return _FALLBACK

        source = RemoteSource(
            socket_path=self.settings.socket_path or "",
            job_name=identity.name,
            config_name=config_name,
        )
        async with self._client_factory(self.settings) as client:
            self._logger.info("Using config URL %s", client.describe(source.request_path))
            result = await client.fetch_job_config(source.job_name, source.config_name)

        if result.error is not None:
            if result.status_code is None:
                self._logger.warning(
                    "No response from orchestrator at %s (%s), falling back to file",
                    result.url,
                    result.error,
                )
            else:
                self._logger.warning(
                    "Bad response from orchestrator at %s (%s), falling back to file",
                    result.url,
                    result.error,
                )
            return _FALLBACK

        payload = result.payload
        if isinstance(payload, MalformedPayload):
            passthrough = (
                self.settings.malformed_payload_policy is MalformedPayloadPolicy.PASSTHROUGH
                and payload.raw is not None
            )
            self._logger.warning(
                "Orchestrator response from %s is not properly formed (%s), %s",
                result.url,
                payload.reason,
                "returning it unparsed" if passthrough else "falling back to file",
            )
            return payload.raw if passthrough else _FALLBACK

        try:
            return await parse_and_substitute(payload.data, ctx)
        except (ParseError, SubstitutionError) as exc:
            self._logger.warning(
                "Error parsing config data from orchestrator for module %s (%s), "
                "falling back to file",
                identity.name,
                exc,
            )
            return _FALLBACK

    async def _attempt_file(self, source: LocalFileSource, ctx: SubstitutionContext) -> Any:
        self._logger.warning(
            "Unable to retrieve config from orchestrator, reading config from %s",
            source.path,
        )
        try:
            text = await self._read_file(source.path)
        except (OSError, UnicodeDecodeError) as exc:
            log_exception(self._logger, "Unable to load configuration from file", exc)
            raise FileReadError(
                f"Unable to load configuration: {exc}", path=source.path
            ) from exc

        try:
            return await parse_and_substitute(text, ctx)
        except (ParseError, SubstitutionError) as exc:
            log_exception(self._logger, f"Error parsing config file {source.path}", exc)
            raise

    # -------------------- write path --------------------
    async def set_module_config(
        self,
        module_name: str,
        configuration: Any,
        config_name: str | None = None,
    ) -> None:
        """Store a module's configuration on the orchestrator.

        Without an orchestrator socket this is a no-op, so modules can run
        standalone.

        Args:
            module_name: Module (orchestrator job) name.
            configuration: JSON-serialisable configuration value.
            config_name: Variant to write; defaults to the same name
                :meth:`configure` would read.

        Raises:
            RemoteWriteError: If the configuration cannot be serialised, the
                orchestrator is unreachable or answers with a status other
                than 201/202.
            ValueError: If ``module_name`` is empty.
        """
        identity = ModuleIdentity(module_name)
        config_name = config_name or self.settings.config_name_for(identity.name)

        with log_context(module=identity.name, config_name=config_name):
            if not self.settings.remote_enabled:
                self._logger.warning(
                    "No %s defined, cannot store module configuration", SOCKET_ENV_VAR
                )
                return None

            try:
                data = json.dumps(configuration)
            except (TypeError, ValueError) as exc:
                log_exception(self._logger, "Configuration is not JSON serialisable", exc)
                raise RemoteWriteError(
                    f"Configuration for {identity.name} is not JSON serialisable: {exc}"
                ) from exc

            request = ConfigWriteRequest(name=config_name, job=identity.name, data=data)
            try:
                async with self._client_factory(self.settings) as client:
                    await client.store_job_config(request)
            except RemoteWriteError as exc:
                log_exception(
                    self._logger,
                    f"Unable to set configuration for module {identity.name}",
                    exc,
                )
                raise
            self._logger.info("Stored configuration for module %s", identity.name)
            return None


# -------------------- module-level shortcuts --------------------
async def configure(
    directory: str | os.PathLike[str],
    module_name: str | None = None,
    file_name: str = DEFAULT_CONFIG_FILE,
) -> Any:
    """Resolve a module's configuration using settings from the environment."""
    return await ModuleConfigurator.from_env().configure(directory, module_name, file_name)


async def set_module_config(
    module_name: str, configuration: Any, config_name: str | None = None
) -> None:
    """Store a module's configuration using settings from the environment."""
    await ModuleConfigurator.from_env().set_module_config(
        module_name, configuration, config_name
    )


__all__ = [
    "ClientFactory",
    "FileReader",
    "ModuleConfigurator",
    "configure",
    "default_client_factory",
    "set_module_config",
]
