from __future__ import annotations

import asyncio

import httpx
import pytest
from conftest import DAY, GATEWAY, MISSING_CONTENT, NOW, PROPOSER, FakeLedgerClient

from governance_sync.content.resolver import ContentResolver
from governance_sync.domain.proposal_record import EVENT_NOT_FOUND, ProposalRecord
from governance_sync.errors import LedgerReadError, ProposalNotFoundError
from governance_sync.ledger.reader import LedgerReader
from governance_sync.orchestration.assembler import ProposalAssembler


def _assemble(ledger: FakeLedgerClient, client: httpx.AsyncClient, index: int) -> ProposalRecord:
    assembler = ProposalAssembler(LedgerReader(ledger), ContentResolver(GATEWAY, client))
    return asyncio.run(assembler.get_proposal(index))


def test_closed_active_proposal_is_schedulable(ledger: FakeLedgerClient, http_client: httpx.AsyncClient) -> None:
    ledger.add_proposal(0)

    record = _assemble(ledger, http_client, 0)

    assert record.status == "active"
    assert record.proposer == PROPOSER
    assert record.content_pointer == "https://gateway.test/ipfs/cid-0"
    assert record.title == "Proposal cid-0"
    assert record.execution_option == "Transaction"
    assert record.proposal_start_date == "May 22, 2024 UTC"
    assert record.end_date_with_time == "May 29, 2024, 12:00:00 AM UTC"
    assert record.event_date == EVENT_NOT_FOUND
    assert record.execution_tx_hash == ""
    assert record.schedulable and not record.cancelable


def test_open_vote_has_no_eligibility(ledger: FakeLedgerClient, http_client: httpx.AsyncClient) -> None:
    ledger.add_proposal(0, end=NOW + DAY, votes_for=0, votes_against=0)

    record = _assemble(ledger, http_client, 0)

    assert not any((record.schedulable, record.cancelable, record.proposal_invalid, record.proposal_rejected))


def test_executed_proposal_carries_tx_hash_and_event_date(
    ledger: FakeLedgerClient,
    http_client: httpx.AsyncClient,
) -> None:
    ledger.add_proposal(0, status=2)

    record = _assemble(ledger, http_client, 0)

    assert record.status == "executed"
    assert record.execution_tx_hash == f"0x{1_000:064x}"
    assert record.event_date == "May 30, 2024, 12:00 AM UTC"
    assert record.is_terminal
    assert not record.schedulable


def test_canceled_proposal_below_quorum_is_invalid(
    ledger: FakeLedgerClient,
    http_client: httpx.AsyncClient,
) -> None:
    ledger.add_proposal(0, status=4, votes_for=5, votes_against=0, quorum=20)

    record = _assemble(ledger, http_client, 0)

    assert record.proposal_invalid and record.cancelable


def test_missing_index_raises_not_found(ledger: FakeLedgerClient, http_client: httpx.AsyncClient) -> None:
    ledger.add_proposal(0)

    with pytest.raises(ProposalNotFoundError, match="Latest proposal index is 0"):
        _assemble(ledger, http_client, 1)


def test_struct_failure_propagates(ledger: FakeLedgerClient, http_client: httpx.AsyncClient) -> None:
    ledger.add_proposal(0)
    ledger.failing_reads.add(0)

    with pytest.raises(LedgerReadError):
        _assemble(ledger, http_client, 0)


def test_unreadable_proposer_and_content_fall_back_to_defaults(
    ledger: FakeLedgerClient,
    http_client: httpx.AsyncClient,
) -> None:
    ledger.add_proposal(0, info=MISSING_CONTENT)
    ledger.corrupt_proposed_log(0)

    record = _assemble(ledger, http_client, 0)

    assert record.proposer == ""
    assert record.title == "N/A"
    assert record.body == "No body available"
    assert record.summary == "No summary available"
    assert record.execution_option == "N/A"
    assert record.content_pointer == f"{GATEWAY}{MISSING_CONTENT}"
    assert record.status == "active"
    assert record.schedulable


class _StalledLogsLedger(FakeLedgerClient):
    async def proposal_count(self) -> int:
        raise ConnectionError("node refused getProposalIndex")

    async def get_logs(self, topic: bytes, index: int) -> list[object]:
        await asyncio.sleep(3_600)
        return []


def test_failed_read_cancels_sibling_reads(http_client: httpx.AsyncClient) -> None:
    ledger = _StalledLogsLedger()
    ledger.add_proposal(0)
    assembler = ProposalAssembler(LedgerReader(ledger), ContentResolver(GATEWAY, http_client))

    async def scenario() -> int:
        with pytest.raises(LedgerReadError, match="proposal index"):
            await assembler.get_proposal(0)
        return len(asyncio.all_tasks())

    assert asyncio.run(scenario()) == 1
