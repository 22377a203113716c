from __future__ import annotations

import asyncio
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from governance_sync.cache.store import ProposalCache
from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.errors import ProposalNotFoundError
from governance_sync.observability.logging import get_logger
from governance_sync.orchestration.assembler import ProposalAssembler
from governance_sync.orchestration.filters import ALL, ProposalFilter, apply_filter
from governance_sync.orchestration.reconciliation import reconcile_record

logger = get_logger("proposal_sync")

FETCH_BATCH_SIZE = 10


@dataclass(slots=True)
class _SyncPass:
    """Mutable state of one ``get_all_proposals`` call."""

    cache_available: bool
    cached_indices: list[int] = field(default_factory=list)
    records: dict[int, ProposalRecord] = field(default_factory=dict)
    cache_writes: int = 0

    def degrade(self, reason: str) -> None:
        if self.cache_available:
            logger.warning("cache_degraded_for_call", reason=reason)
        self.cache_available = False


def _batches(indices: Sequence[int], size: int) -> Iterator[list[int]]:
    for offset in range(0, len(indices), size):
        yield list(indices[offset : offset + size])


class ProposalSynchronizer:
    """Read-through cache over the proposal assembler.

    Cached records are served when present; misses are assembled from the
    ledger in sequential batches and written back, with terminal proposals
    cached indefinitely and everything else for a short window. When the
    cache backend is unreachable the call degrades to plain ledger reads and
    attempts no cache writes at all.
    """

    def __init__(
        self,
        assembler: ProposalAssembler,
        cache: ProposalCache,
        *,
        batch_size: int = FETCH_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._assembler = assembler
        self._cache = cache
        self._batch_size = batch_size

    @property
    def cache(self) -> ProposalCache:
        return self._cache

    async def get_proposal(self, index: int) -> ProposalRecord:
        return await self._assembler.get_proposal(index)

    async def refresh_proposal(self, index: int) -> ProposalRecord:
        """Assemble one proposal from the ledger and publish it to the cache."""
        fresh = await self._assembler.get_proposal(index)
        if not await self._cache.ping():
            return fresh

        cached = await self._cache.read_record(index)
        if not cached.available:
            return fresh

        record = reconcile_record(cached.value, fresh)
        if record is not fresh:
            logger.warning(
                "stale_status_ignored",
                index=index,
                cached_status=record.status,
                fresh_status=fresh.status,
            )

        if await self._cache.write_record(record):
            indices = await self._cache.read_index_set()
            if indices.available and index not in indices.value:
                await self._cache.write_index_set([*indices.value, index])
        return record

    async def get_all_proposals(
        self,
        start_index: int,
        end_index: int,
        status_filter: str = ALL,
        type_filter: str = ALL,
        start_date: str | None = None,
        end_date: str | None = None,
        fetch_only_new: bool = False,
    ) -> list[ProposalRecord]:
        proposal_filter = ProposalFilter(
            status=status_filter,
            execution_type=type_filter,
            start_date=start_date,
            end_date=end_date,
        )
        span = list(range(start_index, max(end_index, 0) - 1, -1))
        logger.info(
            "sync_started",
            start_index=start_index,
            end_index=end_index,
            requested=len(span),
            status_filter=status_filter,
            type_filter=type_filter,
            fetch_only_new=fetch_only_new,
        )

        state = _SyncPass(cache_available=await self._cache.ping())
        if state.cache_available:
            indices = await self._cache.read_index_set()
            if indices.available:
                state.cached_indices = list(indices.value)
            else:
                state.degrade("index set unreadable")

        known = set(state.cached_indices) if state.cache_available else set()
        listed = [index for index in span if index in known]
        to_fetch = [index for index in span if index not in known]

        missed = await self._read_cached(listed, state)
        to_fetch.extend(missed)
        if missed and not fetch_only_new and state.cache_available:
            await self._drop_stale_indices(missed, state)

        logger.info(
            "sync_partitioned",
            cached=len(state.records),
            to_fetch=len(to_fetch),
            cache_available=state.cache_available,
        )

        for batch in _batches(to_fetch, self._batch_size):
            await self._fetch_batch(batch, state)

        result = apply_filter(list(state.records.values()), proposal_filter)
        logger.info(
            "sync_completed",
            fetched=len(state.records),
            returned=len(result),
            cache_writes=state.cache_writes,
        )
        return result

    async def _read_cached(self, indices: list[int], state: _SyncPass) -> list[int]:
        """Load index-listed records; returns the indices that still need fetching."""
        if not indices or not state.cache_available:
            return list(indices)

        reads = await asyncio.gather(*(self._cache.read_record(index) for index in indices))
        missed: list[int] = []
        for index, read in zip(indices, reads):
            if read.available and read.value is not None:
                state.records[index] = read.value
                continue
            if not read.available:
                state.degrade(f"read of proposal {index} failed")
            missed.append(index)
        return missed

    async def _drop_stale_indices(self, stale: list[int], state: _SyncPass) -> None:
        stale_set = set(stale)
        state.cached_indices = [index for index in state.cached_indices if index not in stale_set]
        if await self._cache.write_index_set(state.cached_indices):
            state.cache_writes += 1
            logger.info("stale_indices_removed", indices=sorted(stale_set, reverse=True))
        else:
            state.degrade("index set correction failed")

    async def _fetch_batch(self, batch: list[int], state: _SyncPass) -> None:
        started = time.monotonic()
        outcomes = await asyncio.gather(*(self._fetch_one(index, state) for index in batch))
        newly_cached = [index for index in outcomes if index is not None]

        if newly_cached and state.cache_available:
            merged = [*state.cached_indices, *(i for i in newly_cached if i not in state.cached_indices)]
            if await self._cache.write_index_set(merged):
                state.cached_indices = merged
                state.cache_writes += 1
            else:
                state.degrade("index set update failed")

        logger.info(
            "batch_fetched",
            indices=batch,
            duration_ms=round((time.monotonic() - started) * 1000),
        )

    async def _fetch_one(self, index: int, state: _SyncPass) -> int | None:
        """Assemble and cache one proposal; returns its index if it was written to the cache."""
        try:
            record = await self._assembler.get_proposal(index)
        except ProposalNotFoundError as exc:
            logger.info("proposal_not_yet_created", index=index, error=str(exc))
            return None
        except Exception as exc:
            logger.error("proposal_fetch_failed", index=index, error=str(exc))
            return None

        state.records[index] = record
        if not state.cache_available:
            return None

        if await self._cache.write_record(record):
            state.cache_writes += 1
            return index
        state.degrade(f"write of proposal {index} failed")
        return None
