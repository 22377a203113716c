from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from governance_sync.content.resolver import ContentResolver
from governance_sync.domain.dates import format_day, format_day_with_time
from governance_sync.domain.eligibility import evaluate_eligibility
from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.domain.status import ProposalStatus
from governance_sync.ledger.reader import LedgerReader
from governance_sync.observability.logging import get_logger

logger = get_logger("proposal_assembler")


async def _no_tx_hash() -> str:
    return ""


async def _read_together(*reads: Coroutine[Any, Any, Any]) -> list[Any]:
    """Await reads concurrently; the first failure cancels the rest and is re-raised as is."""
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(read) for read in reads]
    except ExceptionGroup as failures:
        raise failures.exceptions[0] from None
    return [task.result() for task in tasks]


class ProposalAssembler:
    """Build one ``ProposalRecord`` from ledger state and off-chain content."""

    def __init__(self, reader: LedgerReader, resolver: ContentResolver) -> None:
        self._reader = reader
        self._resolver = resolver

    async def get_proposal(self, index: int) -> ProposalRecord:
        proposal_index = int(index)

        proposal_count, latest_block_timestamp, proposer = await _read_together(
            self._reader.proposal_count(),
            self._reader.latest_block_timestamp(),
            self._reader.find_proposer(proposal_index),
        )
        self._reader.ensure_index_exists(proposal_index, proposal_count)

        struct = await self._reader.read_proposal_struct(proposal_index)
        content_pointer = self._resolver.link_for(struct.info)
        content = await self._resolver.resolve(struct.info)

        status = struct.status
        execution_tx_hash, event_date = await _read_together(
            self._reader.find_execution_tx_hash(proposal_index)
            if status == ProposalStatus.EXECUTED.value
            else _no_tx_hash(),
            self._reader.find_event_date(status, proposal_index),
        )

        # ledger time, not wall-clock time, decides whether voting has closed
        eligibility = evaluate_eligibility(
            latest_block_timestamp,
            struct.end_timestamp,
            status,
            struct.votes_total,
            struct.votes_for,
            struct.quorum_snapshot,
        )

        record = ProposalRecord(
            index=proposal_index,
            proposer=proposer,
            content_pointer=content_pointer,
            title=content.title,
            body=content.body,
            summary=content.summary,
            execution_option=content.execution_option,
            start_timestamp=struct.start_timestamp,
            end_timestamp=struct.end_timestamp,
            status=status,
            action=struct.action,
            votes_for=struct.votes_for,
            votes_against=struct.votes_against,
            votes_total=struct.votes_total,
            quorum_snapshot=struct.quorum_snapshot,
            executable=struct.executable,
            quadratic_voting=struct.quadratic_voting,
            proposal_start_date=format_day(struct.start_timestamp),
            proposal_end_date=format_day(struct.end_timestamp),
            start_date_with_time=format_day_with_time(struct.start_timestamp),
            end_date_with_time=format_day_with_time(struct.end_timestamp),
            execution_tx_hash=execution_tx_hash,
            event_date=event_date,
            schedulable=eligibility.schedulable,
            cancelable=eligibility.cancelable,
            proposal_invalid=eligibility.proposal_invalid,
            proposal_rejected=eligibility.proposal_rejected,
        )
        record.ensure_canonical()

        logger.info(
            "proposal_assembled",
            index=proposal_index,
            status=status,
            proposer=proposer,
            quorum_snapshot=struct.quorum_snapshot,
        )
        return record
