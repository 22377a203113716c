from __future__ import annotations

import asyncio

from conftest import make_record

from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.errors import LedgerReadError, ProposalNotFoundError
from governance_sync.orchestration.refresh import REASON_COOLDOWN, REASON_IN_FLIGHT, RefreshCoordinator


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class _ScriptedSynchronizer:
    def __init__(self, *outcomes: object) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    async def refresh_proposal(self, index: int) -> ProposalRecord:
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome  # type: ignore[return-value]


async def _no_sleep(_: float) -> None:
    return None


def _coordinator(synchronizer: _ScriptedSynchronizer, clock: _Clock) -> RefreshCoordinator:
    return RefreshCoordinator(
        synchronizer,  # type: ignore[arg-type]
        cooldown_seconds=15.0,
        max_attempts=3,
        clock=clock,
        sleep=_no_sleep,
    )


def test_successful_refresh_returns_record() -> None:
    record = make_record()
    coordinator = _coordinator(_ScriptedSynchronizer(record), _Clock())

    result = asyncio.run(coordinator.refresh(3))

    assert result.success
    assert result.record == record
    assert result.attempts == 1


def test_second_refresh_inside_cooldown_is_rejected() -> None:
    clock = _Clock()
    synchronizer = _ScriptedSynchronizer(make_record(), make_record())
    coordinator = _coordinator(synchronizer, clock)

    asyncio.run(coordinator.refresh(3))
    clock.now += 4.2
    result = asyncio.run(coordinator.refresh(3))

    assert not result.success
    assert result.reason == REASON_COOLDOWN
    assert result.time_left == 11
    assert synchronizer.calls == 1


def test_cooldown_is_per_index_and_expires() -> None:
    clock = _Clock()
    synchronizer = _ScriptedSynchronizer(make_record(), make_record(index=4), make_record())
    coordinator = _coordinator(synchronizer, clock)

    asyncio.run(coordinator.refresh(3))
    assert asyncio.run(coordinator.refresh(4)).success
    clock.now += 15.0
    assert asyncio.run(coordinator.refresh(3)).success


def test_transient_failures_are_retried() -> None:
    synchronizer = _ScriptedSynchronizer(LedgerReadError("node down"), make_record())
    coordinator = _coordinator(synchronizer, _Clock())

    result = asyncio.run(coordinator.refresh(3))

    assert result.success
    assert result.attempts == 2


def test_retries_are_bounded() -> None:
    synchronizer = _ScriptedSynchronizer(*(LedgerReadError("node down") for _ in range(3)))
    coordinator = _coordinator(synchronizer, _Clock())

    result = asyncio.run(coordinator.refresh(3))

    assert not result.success
    assert result.reason == "node down"
    assert synchronizer.calls == 3


def test_missing_proposal_is_not_retried() -> None:
    synchronizer = _ScriptedSynchronizer(ProposalNotFoundError(9, 4))
    coordinator = _coordinator(synchronizer, _Clock())

    result = asyncio.run(coordinator.refresh(9))

    assert not result.success
    assert "does not exist" in (result.reason or "")
    assert synchronizer.calls == 1


def test_concurrent_refresh_of_same_index_is_rejected() -> None:
    release = asyncio.Event()

    class _SlowSynchronizer:
        async def refresh_proposal(self, index: int) -> ProposalRecord:
            await release.wait()
            return make_record(index=index)

    coordinator = RefreshCoordinator(_SlowSynchronizer(), cooldown_seconds=0.0)  # type: ignore[arg-type]

    async def scenario() -> tuple[bool, str | None]:
        first = asyncio.create_task(coordinator.refresh(3))
        await asyncio.sleep(0)
        second = await coordinator.refresh(3)
        release.set()
        await first
        return second.success, second.reason

    assert asyncio.run(scenario()) == (False, REASON_IN_FLIGHT)
