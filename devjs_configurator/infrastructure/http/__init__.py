"""HTTP adapters for devjs-configurator.

This package talks to the orchestrator's job configuration API over its local
Unix domain socket.
"""

from .client import (
    ORCHESTRATOR_HOST,
    WRITE_ACCEPTED_STATUSES,
    OrchestratorClient,
    RemoteReadResult,
    job_config_path,
)

__all__ = [
    "ORCHESTRATOR_HOST",
    "WRITE_ACCEPTED_STATUSES",
    "OrchestratorClient",
    "RemoteReadResult",
    "job_config_path",
]
