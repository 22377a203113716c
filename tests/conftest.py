from __future__ import annotations

import fnmatch
import json
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import replace
from typing import Any

import httpx
import pytest

from governance_sync.config import AppSettings
from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.ledger.abi import PROPOSED_TOPIC
from governance_sync.ledger.client import LogEntry
from governance_sync.ledger.event_codecs import ProposedEvent, StatusUpdatedEvent
from governance_sync.runtime.services import SyncServices, open_services

NOW = 1_717_200_000  # Jun 01, 2024 00:00:00 UTC
DAY = 86_400
PROPOSER = "0x1111111111111111111111111111111111111111"
ACTION = "0x2222222222222222222222222222222222222222"
GOVERNOR = "0x3333333333333333333333333333333333333333"
GATEWAY = "https://gateway.test/ipfs/"
MISSING_CONTENT = "missing-cid"


class InMemoryCacheBackend:
    """Dict-backed cache that records TTLs and can be switched off."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.set_calls: list[str] = []
        self.failing_operations: set[str] = set()
        self.down = False

    def _check(self, operation: str) -> None:
        if self.down or operation in self.failing_operations:
            raise ConnectionError(f"cache {operation} refused")

    async def get(self, key: str) -> str | None:
        self._check("get")
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self._check("set")
        self.store[key] = value
        self.ttls[key] = ex
        self.set_calls.append(key)

    async def delete(self, *keys: str) -> None:
        self._check("delete")
        for key in keys:
            self.store.pop(key, None)
            self.ttls.pop(key, None)

    async def ping(self) -> None:
        self._check("ping")

    async def keys(self, pattern: str) -> list[str]:
        self._check("keys")
        return [key for key in self.store if fnmatch.fnmatchcase(key, pattern)]

    def index_set(self, key: str = "research_sc_indices") -> list[int]:
        return json.loads(self.store.get(key, "[]"))


class FakeLedgerClient:
    """Governor contract with proposals and the event logs they would emit."""

    def __init__(self, now: int = NOW) -> None:
        self.now = now
        self.proposals: dict[int, tuple[Any, ...]] = {}
        self.logs: dict[tuple[bytes, int], list[LogEntry]] = {}
        self.block_timestamps: dict[int, int] = {}
        self.parameters: tuple[int, ...] = (
            7 * DAY,
            10,
            DAY,
            DAY,
            3600,
            600,
            1_000_000_000_000_000_000,
        )
        self.proposal_reads: list[int] = []
        self.failing_logs = False
        self.failing_reads: set[int] = set()

    def _append_log(self, topics: tuple[bytes, ...], data: bytes, block: int, tx_hash: str) -> None:
        entry = LogEntry(block_number=block, transaction_hash=tx_hash, topics=topics, data=data)
        self.logs.setdefault((topics[0], int.from_bytes(topics[1], "big")), []).append(entry)

    def add_proposal(
        self,
        index: int,
        *,
        status: int = 0,
        info: str | None = None,
        start: int = NOW - 10 * DAY,
        end: int = NOW - 3 * DAY,
        votes_for: int = 30,
        votes_against: int = 10,
        quorum: int = 20,
        executable: bool = True,
        quadratic_voting: bool = False,
        proposer: str = PROPOSER,
    ) -> None:
        self.proposals[index] = (
            info if info is not None else f"cid-{index}",
            start,
            end,
            status,
            ACTION,
            votes_for,
            votes_against,
            votes_for + votes_against,
            quorum,
            executable,
            quadratic_voting,
        )
        proposed = ProposedEvent(
            index=index,
            user=proposer,
            info=info if info is not None else f"cid-{index}",
            start_timestamp=start,
            end_timestamp=end,
            action=ACTION,
            executable=executable,
        )
        self._append_log(proposed.topics(), proposed.encode_data(), 10 + index, f"0x{index:064x}")

        if status != 0:
            self.set_status(index, status, block=1_000 + index, timestamp=end + DAY)

    def set_status(self, index: int, status: int, *, block: int, timestamp: int) -> None:
        raw = list(self.proposals[index])
        raw[3] = status
        self.proposals[index] = tuple(raw)
        event = StatusUpdatedEvent(proposal_id=index, status=status)
        self._append_log(event.topics(), event.encode_data(), block, f"0x{block:064x}")
        self.block_timestamps[block] = timestamp

    def corrupt_proposed_log(self, index: int) -> None:
        key = (PROPOSED_TOPIC, index)
        self.logs[key] = [replace(entry, data=b"\x00") for entry in self.logs[key]]

    async def proposal_count(self) -> int:
        return len(self.proposals)

    async def read_proposal(self, index: int) -> tuple[Any, ...]:
        self.proposal_reads.append(index)
        if index in self.failing_reads:
            raise ConnectionError(f"node refused getProposal({index})")
        return self.proposals[index]

    async def governance_parameters(self) -> tuple[int, ...]:
        return self.parameters

    async def get_logs(self, topic: bytes, index: int) -> list[LogEntry]:
        if self.failing_logs:
            raise ConnectionError("eth_getLogs refused")
        return list(self.logs.get((topic, index), []))

    async def block_timestamp(self, block: int | str = "latest") -> int:
        if block == "latest":
            return self.now
        return self.block_timestamps[int(block)]


def content_payload(pointer: str) -> dict[str, str]:
    return {
        "title": f"Proposal {pointer}",
        "body": f"Body of {pointer}",
        "summary": f"Summary of {pointer}",
        "executionOption": "Transaction",
    }


@pytest.fixture
def content_requests() -> list[str]:
    return []


@pytest.fixture
def http_client(content_requests: list[str]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        pointer = request.url.path.rsplit("/", 1)[-1]
        content_requests.append(pointer)
        if pointer == MISSING_CONTENT:
            return httpx.Response(404)
        return httpx.Response(200, json=content_payload(pointer))

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def cache_backend() -> InMemoryCacheBackend:
    return InMemoryCacheBackend()


@pytest.fixture
def ledger() -> FakeLedgerClient:
    return FakeLedgerClient()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        governor_address=GOVERNOR,
        content_gateway_url=GATEWAY,
        governance_track="research",
        refresh_retry_delay_seconds=0.0,
    )


@pytest.fixture
def build_services(
    settings: AppSettings,
    ledger: FakeLedgerClient,
    cache_backend: InMemoryCacheBackend,
    http_client: httpx.AsyncClient,
) -> Callable[..., AbstractAsyncContextManager[SyncServices]]:
    def _build(overrides: AppSettings | None = None) -> AbstractAsyncContextManager[SyncServices]:
        return open_services(
            overrides or settings,
            ledger_client=ledger,
            cache_backend=cache_backend,
            http_client=http_client,
        )

    return _build


def make_record(**overrides: object) -> ProposalRecord:
    base = ProposalRecord(
        index=3,
        proposer="0x1111111111111111111111111111111111111111",
        content_pointer="https://gateway.test/ipfs/cid-3",
        title="Fund the lab",
        body="Body",
        summary="Summary",
        execution_option="Transaction",
        start_timestamp=1_716_336_000,
        end_timestamp=1_716_940_800,
        status="active",
        action="0x2222222222222222222222222222222222222222",
        votes_for=30,
        votes_against=10,
        votes_total=40,
        quorum_snapshot=20,
        executable=True,
        quadratic_voting=False,
        proposal_start_date="May 22, 2024 UTC",
        proposal_end_date="May 29, 2024 UTC",
        start_date_with_time="May 22, 2024, 12:00:00 AM UTC",
        end_date_with_time="May 29, 2024, 12:00:00 AM UTC",
        execution_tx_hash="",
        event_date="Event not found",
        schedulable=True,
        cancelable=False,
        proposal_invalid=False,
        proposal_rejected=False,
    )
    return replace(base, **overrides)
