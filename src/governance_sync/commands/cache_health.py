from __future__ import annotations

from argparse import Namespace

from governance_sync.commands._runner import run_with_services
from governance_sync.config import AppSettings
from governance_sync.runtime.services import SyncServices
from governance_sync.types import CommandResult, CommandStatus

COMMAND = "cache-health"


async def cache_health(services: SyncServices, _: Namespace) -> CommandResult:
    available = await services.cache.ping()
    indices = await services.cache.read_index_set() if available else None
    return CommandResult(
        command=COMMAND,
        status=CommandStatus.OK if available else CommandStatus.DEGRADED,
        details={
            "track": services.cache.track.value,
            "cache_status": "ok" if available else "unavailable",
            "cached_indices": len(indices.value) if indices is not None else 0,
        },
    )


def run_cache_health(args: Namespace, settings: AppSettings) -> CommandResult:
    return run_with_services(COMMAND, cache_health, args, settings)
