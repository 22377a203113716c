from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass

from governance_sync.config import get_settings
from governance_sync.errors import GovernanceSyncError
from governance_sync.observability.logging import configure_logging, get_logger
from governance_sync.runtime.services import SyncServices, open_services

DEFAULT_POLL_INTERVAL_SECONDS = 60.0

logger = get_logger("sync_worker")


@dataclass(slots=True)
class SyncWorker:
    """Keeps the proposal cache warm on an interval.

    Each cycle evicts cached proposals that can still change state, then syncs
    every index missing from the cache.
    """

    services: SyncServices
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS

    async def run_once(self) -> int:
        count = await self.services.reader.proposal_count()
        if count <= 0:
            logger.info("sync_cycle_skipped", reason="no proposals")
            return 0

        # Non-terminal records are evicted so the incremental sync refetches them.
        await self.services.cache.refresh_active()
        records = await self.services.synchronizer.get_all_proposals(
            count - 1,
            0,
            fetch_only_new=True,
        )
        logger.info(
            "sync_cycle",
            track=self.services.cache.track.value,
            proposal_count=count,
            synced=len(records),
        )
        return len(records)

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except GovernanceSyncError as exc:
                logger.error("sync_cycle_failed", error=str(exc))
            await asyncio.sleep(self.poll_interval_seconds)


def _poll_interval_from_env() -> float:
    raw_interval = os.environ.get("SYNC_POLL_INTERVAL_SECONDS", str(DEFAULT_POLL_INTERVAL_SECONDS)).strip()
    try:
        interval = float(raw_interval)
    except ValueError:
        return DEFAULT_POLL_INTERVAL_SECONDS

    if interval <= 0:
        return DEFAULT_POLL_INTERVAL_SECONDS
    return interval


async def run_worker() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)
    async with open_services(settings) as services:
        await SyncWorker(services=services, poll_interval_seconds=_poll_interval_from_env()).run_forever()


if __name__ == "__main__":
    asyncio.run(run_worker())
