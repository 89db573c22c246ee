"""Client for the orchestrator's job configuration API.

The orchestrator listens on a local Unix domain socket and speaks plain HTTP
over it. Reads never raise: every failure is folded into a
:class:`RemoteReadResult` so the resolver can fall back to the module's file.
Writes raise :class:`RemoteWriteError`.

Usage:
    async with OrchestratorClient("/tmp/maestroapi.sock") as client:
        result = await client.fetch_job_config("my-module", "default")
        if result.ok:
            print(result.payload)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from devjs_configurator.domain.models import (
    ConfigWriteRequest,
    DecodedPayload,
    MalformedPayload,
    decode_config_response,
)
from devjs_configurator.errors import RemoteWriteError
from devjs_configurator.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# Host the orchestrator expects; the socket path does the actual routing.
ORCHESTRATOR_HOST = "127.0.0.1"
WRITE_ACCEPTED_STATUSES = frozenset({201, 202})


@dataclass
class RemoteReadResult:
    """Outcome of a job configuration read."""

    url: str
    status_code: int | None = None
    payload: DecodedPayload | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code == 200 and self.payload is not None


def job_config_path(job_name: str, config_name: str) -> str:
    return f"/jobConfig/{quote(job_name, safe='')}/{quote(config_name, safe='')}"


class OrchestratorClient:
    """Async client for ``/jobConfig`` on the orchestrator's Unix socket.

    Attributes:
        socket_path: Path of the orchestrator's Unix domain socket.
        timeout: Request timeout in seconds, ``None`` for no limit.
    """

    def __init__(
        self,
        socket_path: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the orchestrator client.

        Args:
            socket_path: Unix socket the orchestrator listens on.
            timeout: Per-request timeout in seconds; ``None`` waits forever.
            transport: Replacement transport, mainly for tests.
        """
        self.socket_path = socket_path
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "OrchestratorClient":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            transport = self._transport or httpx.AsyncHTTPTransport(uds=self.socket_path)
            self._client = httpx.AsyncClient(
                transport=transport,
                base_url=f"http://{ORCHESTRATOR_HOST}",
                timeout=httpx.Timeout(self.timeout),
                headers={"Host": ORCHESTRATOR_HOST, "Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def describe(self, path: str) -> str:
        """Human-readable location used in log messages."""
        return f"unix:{self.socket_path}:{path}"

    async def fetch_job_config(self, job_name: str, config_name: str) -> RemoteReadResult:
        """Read a job's configuration.

        Returns:
            RemoteReadResult. ``error`` is set for transport failures and
            non-200 statuses; otherwise ``payload`` holds the decoded body.
        """
        path = job_config_path(job_name, config_name)
        url = self.describe(path)
        try:
            client = await self._get_client()
            response = await client.get(path, headers={"Connection": "close"})
        except httpx.HTTPError as e:
            return RemoteReadResult(url=url, error=f"{type(e).__name__}: {e}")

        if response.status_code != 200:
            return RemoteReadResult(
                url=url,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
            )
        return RemoteReadResult(
            url=url,
            status_code=response.status_code,
            payload=self._decode_body(response),
        )

    def _decode_body(self, response: httpx.Response) -> DecodedPayload:
        if not response.content.strip():
            return MalformedPayload(raw=None, reason="response body is empty")
        try:
            body: Any = response.json()
        except ValueError:
            return MalformedPayload(raw=response.text, reason="response body is not JSON")
        return decode_config_response(body)

    async def store_job_config(self, request: ConfigWriteRequest) -> int:
        """Store a job's configuration.

        Returns:
            The HTTP status code (201 or 202).

        Raises:
            RemoteWriteError: On transport failure or any other status.
        """
        path = job_config_path(request.job, request.name)
        try:
            client = await self._get_client()
            response = await client.post(path, json=request.model_dump())
        except httpx.HTTPError as e:
            raise RemoteWriteError(
                f"Unable to reach orchestrator at {self.describe(path)}: {e}"
            ) from e

        if response.status_code not in WRITE_ACCEPTED_STATUSES:
            raise RemoteWriteError(
                f"HTTP error {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug("Stored config %s (HTTP %d)", path, response.status_code)
        return response.status_code


__all__ = [
    "ORCHESTRATOR_HOST",
    "WRITE_ACCEPTED_STATUSES",
    "OrchestratorClient",
    "RemoteReadResult",
    "job_config_path",
]
