from __future__ import annotations

from argparse import Namespace

from governance_sync.commands._runner import failure, parse_non_negative, run_with_services
from governance_sync.config import AppSettings
from governance_sync.runtime.services import SyncServices
from governance_sync.types import CommandResult, CommandStatus

COMMAND = "invalidate-cache"


async def invalidate_cache(services: SyncServices, args: Namespace) -> CommandResult:
    cache = services.cache
    raw_index = getattr(args, "index", None)
    raw_new_index = getattr(args, "new_index", None)
    active_only = bool(getattr(args, "active", False))
    if sum((raw_index is not None, raw_new_index is not None, active_only)) > 1:
        return failure(COMMAND, "--index, --new-index and --active are mutually exclusive")

    try:
        if raw_new_index is not None:
            new_index = parse_non_negative(raw_new_index, "new_index")
            done = await cache.register_new_proposal(new_index)
            details: dict[str, object] = {"scope": "new_proposal", "index": new_index}
        elif raw_index is not None:
            index = parse_non_negative(raw_index, "index")
            done = await cache.invalidate_proposal(index)
            details = {"scope": "proposal", "index": index}
        elif active_only:
            evicted = await cache.refresh_active()
            done = evicted is not None
            details = {"scope": "active", "keys_removed": evicted or 0}
        else:
            removed = await cache.invalidate_all()
            done = removed is not None
            details = {"scope": "all", "keys_removed": removed or 0}
    except ValueError as exc:
        return failure(COMMAND, str(exc))

    details["track"] = cache.track.value
    if not done:
        details["error"] = "cache backend unavailable"
        return CommandResult(command=COMMAND, status=CommandStatus.DEGRADED, details=details)
    return CommandResult(command=COMMAND, status=CommandStatus.OK, details=details)


def run_invalidate_cache(args: Namespace, settings: AppSettings) -> CommandResult:
    return run_with_services(COMMAND, invalidate_cache, args, settings)
