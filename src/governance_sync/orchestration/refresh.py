from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.errors import ProposalNotFoundError
from governance_sync.observability.logging import get_logger
from governance_sync.orchestration.synchronizer import ProposalSynchronizer

logger = get_logger("refresh_coordinator")

REASON_IN_FLIGHT = "Already loading proposals"
REASON_COOLDOWN = "cooldown"


@dataclass(slots=True, frozen=True)
class RefreshResult:
    success: bool
    reason: str | None = None
    time_left: int | None = None
    attempts: int = 0
    record: ProposalRecord | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "reason": self.reason,
            "time_left": self.time_left,
            "attempts": self.attempts,
            "record": self.record.as_dict() if self.record is not None else None,
        }


class RefreshCoordinator:
    """Manual, cooldown-gated refresh of single proposals.

    Each index may be refreshed at most once per cooldown window, whatever
    the outcome, and only one refresh per index runs at a time. Transient
    failures are retried up to ``max_attempts``; a missing proposal is not.
    """

    def __init__(
        self,
        synchronizer: ProposalSynchronizer,
        *,
        cooldown_seconds: float = 15.0,
        max_attempts: int = 3,
        retry_delay_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._synchronizer = synchronizer
        self._cooldown = cooldown_seconds
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_attempt: dict[int, float] = {}
        self._in_flight: set[int] = set()

    def time_left(self, index: int) -> int:
        last = self._last_attempt.get(index)
        if last is None:
            return 0
        remaining = self._cooldown - (self._clock() - last)
        return max(0, math.ceil(remaining))

    async def refresh(self, index: int) -> RefreshResult:
        if index in self._in_flight:
            return RefreshResult(success=False, reason=REASON_IN_FLIGHT)

        remaining = self.time_left(index)
        if remaining > 0:
            logger.info("refresh_cooldown_active", index=index, time_left=remaining)
            return RefreshResult(success=False, reason=REASON_COOLDOWN, time_left=remaining)

        self._in_flight.add(index)
        self._last_attempt[index] = self._clock()
        try:
            return await self._refresh_with_retries(index)
        finally:
            self._in_flight.discard(index)

    async def _refresh_with_retries(self, index: int) -> RefreshResult:
        last_error = "refresh failed"
        for attempt in range(1, self._max_attempts + 1):
            try:
                record = await self._synchronizer.refresh_proposal(index)
            except ProposalNotFoundError as exc:
                return RefreshResult(success=False, reason=str(exc), attempts=attempt)
            except Exception as exc:
                last_error = str(exc)
                logger.warning("refresh_attempt_failed", index=index, attempt=attempt, error=last_error)
                if attempt < self._max_attempts:
                    await self._sleep(self._retry_delay * attempt)
                continue

            logger.info("proposal_refreshed", index=index, attempts=attempt, status=record.status)
            return RefreshResult(success=True, attempts=attempt, record=record)

        return RefreshResult(success=False, reason=last_error, attempts=self._max_attempts)
