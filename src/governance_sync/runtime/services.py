from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass

import httpx

from governance_sync.cache.redis_backend import RedisCacheBackend
from governance_sync.cache.store import CacheBackend, ProposalCache
from governance_sync.config import AppSettings
from governance_sync.content.resolver import ContentResolver
from governance_sync.ledger.client import LedgerClient
from governance_sync.ledger.reader import LedgerReader
from governance_sync.ledger.rpc_client import RpcClientFactory
from governance_sync.orchestration.assembler import ProposalAssembler
from governance_sync.orchestration.refresh import RefreshCoordinator
from governance_sync.orchestration.synchronizer import ProposalSynchronizer
from governance_sync.types import GovernanceTrack


@dataclass(slots=True, frozen=True)
class SyncServices:
    settings: AppSettings
    reader: LedgerReader
    cache: ProposalCache
    synchronizer: ProposalSynchronizer
    refresher: RefreshCoordinator


def track_from_settings(settings: AppSettings) -> GovernanceTrack:
    try:
        return GovernanceTrack(settings.governance_track.strip().lower())
    except ValueError:
        return GovernanceTrack.RESEARCH


@asynccontextmanager
async def open_services(
    settings: AppSettings,
    *,
    ledger_client: LedgerClient | None = None,
    cache_backend: CacheBackend | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[SyncServices]:
    """Wire the sync engine; collaborators not supplied are built from settings."""
    async with AsyncExitStack() as stack:
        if http_client is None:
            http_client = await stack.enter_async_context(
                httpx.AsyncClient(timeout=settings.content_timeout_seconds, follow_redirects=True)
            )
        if cache_backend is None:
            redis_backend = RedisCacheBackend.from_settings(settings)
            stack.push_async_callback(redis_backend.aclose)
            cache_backend = redis_backend
        if ledger_client is None:
            ledger_client = RpcClientFactory(settings).create_ledger_client()

        reader = LedgerReader(ledger_client)
        resolver = ContentResolver(settings.content_gateway_url, http_client)
        cache = ProposalCache(
            cache_backend,
            track=track_from_settings(settings),
            temporary_ttl_seconds=settings.temporary_cache_ttl_seconds,
            index_set_ttl_seconds=settings.index_set_ttl_seconds,
        )
        synchronizer = ProposalSynchronizer(
            ProposalAssembler(reader, resolver),
            cache,
            batch_size=settings.fetch_batch_size,
        )
        refresher = RefreshCoordinator(
            synchronizer,
            cooldown_seconds=settings.refresh_cooldown_seconds,
            max_attempts=settings.refresh_max_attempts,
            retry_delay_seconds=settings.refresh_retry_delay_seconds,
        )
        yield SyncServices(
            settings=settings,
            reader=reader,
            cache=cache,
            synchronizer=synchronizer,
            refresher=refresher,
        )
