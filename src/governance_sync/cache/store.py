from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.observability.logging import get_logger
from governance_sync.types import GovernanceTrack

logger = get_logger("proposal_cache")

T = TypeVar("T")

TEMPORARY_TTL_SECONDS = 900
INDEX_SET_TTL_SECONDS = 86400 * 7


class CacheBackend(Protocol):
    """Key-value store with per-key expiry. Any raised exception means unreachable."""

    async def get(self, key: str) -> str | bytes | None:
        ...

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        ...

    async def delete(self, *keys: str) -> None:
        ...

    async def ping(self) -> None:
        ...

    async def keys(self, pattern: str) -> list[str]:
        ...


@dataclass(slots=True, frozen=True)
class CacheRead(Generic[T]):
    value: T
    available: bool


class ProposalCache:
    """Proposal records and the index set of a governance track.

    Every operation is fail-safe: a backend error is logged and reported
    through ``available=False`` (or a ``False`` return) instead of raising.
    """

    def __init__(
        self,
        backend: CacheBackend,
        *,
        track: GovernanceTrack = GovernanceTrack.RESEARCH,
        temporary_ttl_seconds: int = TEMPORARY_TTL_SECONDS,
        index_set_ttl_seconds: int = INDEX_SET_TTL_SECONDS,
    ) -> None:
        self._backend = backend
        self._track = track
        self._temporary_ttl = temporary_ttl_seconds
        self._index_set_ttl = index_set_ttl_seconds

    @property
    def track(self) -> GovernanceTrack:
        return self._track

    def record_key(self, index: int) -> str:
        return self._track.proposal_key(index)

    @property
    def index_set_key(self) -> str:
        return self._track.index_set_key

    def ttl_for(self, record: ProposalRecord) -> int | None:
        return None if record.is_terminal else self._temporary_ttl

    async def _safe(
        self,
        operation_name: str,
        operation: Callable[[], Awaitable[T]],
        fallback: T,
    ) -> CacheRead[T]:
        try:
            return CacheRead(value=await operation(), available=True)
        except Exception as exc:
            logger.warning("cache_operation_failed", operation=operation_name, error=str(exc))
            return CacheRead(value=fallback, available=False)

    async def ping(self) -> bool:
        async def _ping() -> bool:
            await self._backend.ping()
            return True

        result = await self._safe("ping", _ping, False)
        if not result.available:
            logger.warning("cache_unavailable", track=self._track.value)
        return result.value

    async def read_index_set(self) -> CacheRead[list[int]]:
        async def _read() -> list[int]:
            raw = await self._backend.get(self.index_set_key)
            try:
                return _decode_index_set(raw)
            except ValueError as exc:
                logger.warning("cached_indices_corrupt", error=str(exc))
                return []

        return await self._safe("get cached indices", _read, [])

    async def write_index_set(self, indices: Iterable[int]) -> bool:
        payload = json.dumps(sorted(set(indices), reverse=True))

        async def _write() -> bool:
            await self._backend.set(self.index_set_key, payload, ex=self._index_set_ttl)
            return True

        return (await self._safe("update indices", _write, False)).available

    async def read_record(self, index: int) -> CacheRead[ProposalRecord | None]:
        result = await self._safe(
            f"get cached proposal {index}",
            lambda: self._backend.get(self.record_key(index)),
            None,
        )
        if not result.available or result.value is None:
            return CacheRead(value=None, available=result.available)

        try:
            record = ProposalRecord.from_json(result.value)
        except ValueError as exc:
            logger.warning("cached_proposal_corrupt", index=index, error=str(exc))
            return CacheRead(value=None, available=True)
        return CacheRead(value=record, available=True)

    async def write_record(self, record: ProposalRecord) -> bool:
        ttl = self.ttl_for(record)

        async def _write() -> bool:
            await self._backend.set(self.record_key(record.index), record.to_json(), ex=ttl)
            return True

        written = (await self._safe(f"cache proposal {record.index}", _write, False)).available
        if written:
            logger.debug(
                "proposal_cached",
                index=record.index,
                permanent=ttl is None,
                ttl_seconds=ttl,
            )
        return written

    async def delete_records(self, indices: Iterable[int]) -> bool:
        keys = [self.record_key(index) for index in indices]
        if not keys:
            return True

        async def _delete() -> bool:
            await self._backend.delete(*keys)
            return True

        return (await self._safe("delete proposals", _delete, False)).available

    async def invalidate_proposal(self, index: int) -> bool:
        """Drop one record and its index-set entry."""
        indices = await self.read_index_set()
        if not indices.available:
            return False
        if not await self.delete_records([index]):
            return False
        remaining = [cached for cached in indices.value if cached != index]
        return await self.write_index_set(remaining)

    async def invalidate_all(self) -> int | None:
        """Drop every record of the track and the index set; returns the number of keys removed.

        Records are found by key pattern as well as through the index set.
        """
        indices = await self.read_index_set()
        if not indices.available:
            return None
        stored = await self._safe(
            "scan proposals",
            lambda: self._backend.keys(self._track.proposal_key_pattern),
            [],
        )
        if not stored.available:
            return None
        record_keys = {self.record_key(index) for index in indices.value} | set(stored.value)
        keys = sorted(record_keys) + [self.index_set_key]

        async def _delete() -> bool:
            await self._backend.delete(*keys)
            return True

        if not (await self._safe("invalidate all", _delete, False)).available:
            return None
        logger.info("cache_invalidated", track=self._track.value, keys=len(keys))
        return len(keys)

    async def refresh_active(self) -> int | None:
        """Evict cached records that can still change status; returns how many were evicted.

        The index set is left untouched, so the next sync treats the evicted
        records as misses and reads them again from the ledger.
        """
        indices = await self.read_index_set()
        if not indices.available:
            return None
        reads = await asyncio.gather(*(self.read_record(index) for index in indices.value))
        if not all(read.available for read in reads):
            return None
        active = [
            index
            for index, read in zip(indices.value, reads)
            if read.value is not None and not read.value.is_terminal
        ]
        if not await self.delete_records(active):
            return None
        if active:
            logger.info("active_proposals_evicted", track=self._track.value, indices=active)
        return len(active)

    async def register_new_proposal(self, new_index: int) -> bool:
        # a record left over from an earlier deployment must not shadow the new proposal
        return await self.invalidate_proposal(new_index)


def _decode_index_set(raw: str | bytes | None) -> list[int]:
    if raw is None:
        return []
    decoded = json.loads(raw)
    if not isinstance(decoded, list):
        raise ValueError("index set must be a JSON list")
    return [int(value) for value in decoded if isinstance(value, int) and not isinstance(value, bool)]
