from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from governance_sync.domain.dates import format_event_date
from governance_sync.domain.proposal_record import EVENT_DATE_ERROR, EVENT_NOT_FOUND
from governance_sync.domain.status import ProposalStatus, map_status_code
from governance_sync.errors import LedgerReadError, ProposalNotFoundError
from governance_sync.ledger.abi import PROPOSED_TOPIC, STATUS_UPDATED_TOPIC
from governance_sync.ledger.client import LedgerClient, LogEntry
from governance_sync.ledger.event_codecs import (
    EventDecodeError,
    decode_proposed,
    decode_status_updated,
)
from governance_sync.observability.logging import get_logger

logger = get_logger("ledger_reader")

PROPOSAL_STRUCT_FIELDS = 11
GOVERNANCE_PARAMETER_FIELDS = 7


@dataclass(slots=True, frozen=True)
class ProposalStruct:
    info: str
    start_timestamp: int
    end_timestamp: int
    status_code: int
    action: str
    votes_for: int
    votes_against: int
    votes_total: int
    quorum_snapshot: int
    executable: bool
    quadratic_voting: bool

    @property
    def status(self) -> str:
        return map_status_code(self.status_code)

    @classmethod
    def decode(cls, raw: Sequence[Any]) -> ProposalStruct:
        if raw is None or len(raw) != PROPOSAL_STRUCT_FIELDS:
            raise ValueError("unexpected proposal struct shape")
        (
            info,
            start_timestamp,
            end_timestamp,
            status_code,
            action,
            votes_for,
            votes_against,
            votes_total,
            quorum_snapshot,
            executable,
            quadratic_voting,
        ) = raw
        return cls(
            info=str(info),
            start_timestamp=int(start_timestamp),
            end_timestamp=int(end_timestamp),
            status_code=int(status_code),
            action=str(action),
            votes_for=int(votes_for),
            votes_against=int(votes_against),
            votes_total=int(votes_total),
            quorum_snapshot=int(quorum_snapshot),
            executable=bool(executable),
            quadratic_voting=bool(quadratic_voting),
        )


@dataclass(slots=True, frozen=True)
class GovernanceParameters:
    proposal_lifetime: int
    quorum: int
    vote_lock_time: int
    propose_lock_time: int
    vote_change_time: int
    vote_change_cutoff: int
    dd_threshold: int

    @classmethod
    def decode(cls, raw: Sequence[Any]) -> GovernanceParameters:
        if raw is None or len(raw) != GOVERNANCE_PARAMETER_FIELDS:
            raise ValueError("unexpected governance parameters shape")
        return cls(*(int(value) for value in raw))

    def as_dict(self) -> dict[str, str]:
        # dd_threshold is an 18-decimal token amount; keep it exact as a string
        return {
            "proposal_lifetime": str(self.proposal_lifetime),
            "quorum": str(self.quorum),
            "vote_lock_time": str(self.vote_lock_time),
            "propose_lock_time": str(self.propose_lock_time),
            "vote_change_time": str(self.vote_change_time),
            "vote_change_cutoff": str(self.vote_change_cutoff),
            "dd_threshold": str(self.dd_threshold),
        }


class LedgerReader:
    """Typed reads of governor storage and event history.

    Struct, count and block reads are fatal and raise ``LedgerReadError``.
    Log scans never raise: they degrade to an empty proposer, an empty
    transaction hash, or one of the event-date sentinels.
    """

    def __init__(self, client: LedgerClient) -> None:
        self._client = client

    async def proposal_count(self) -> int:
        try:
            return int(await self._client.proposal_count())
        except Exception as exc:
            raise LedgerReadError(f"failed to read proposal index: {exc}") from exc

    async def latest_block_timestamp(self) -> int:
        try:
            return int(await self._client.block_timestamp("latest"))
        except Exception as exc:
            raise LedgerReadError(f"failed to read latest block: {exc}") from exc

    @staticmethod
    def ensure_index_exists(index: int, proposal_count: int) -> None:
        latest_index = max(0, proposal_count - 1)
        if index < 0 or index >= proposal_count:
            raise ProposalNotFoundError(index, latest_index)

    async def read_proposal_struct(self, index: int) -> ProposalStruct:
        try:
            raw = await self._client.read_proposal(index)
            return ProposalStruct.decode(raw)
        except Exception as exc:
            raise LedgerReadError(f"Failed to fetch proposal {index}: {exc}", index=index) from exc

    async def read_governance_parameters(self) -> GovernanceParameters:
        try:
            return GovernanceParameters.decode(await self._client.governance_parameters())
        except Exception as exc:
            raise LedgerReadError(f"failed to read governance parameters: {exc}") from exc

    async def find_proposer(self, index: int) -> str:
        try:
            logs = await self._client.get_logs(PROPOSED_TOPIC, index)
        except Exception as exc:
            logger.warning("proposer_log_scan_failed", index=index, error=str(exc))
            return ""

        if not logs:
            return ""
        try:
            return decode_proposed(logs[0]).user
        except EventDecodeError as exc:
            logger.warning("proposer_log_decode_failed", index=index, error=str(exc))
            return ""

    async def _status_logs_newest_first(self, index: int) -> list[LogEntry]:
        logs = await self._client.get_logs(STATUS_UPDATED_TOPIC, index)
        return sorted(logs, key=lambda log: log.block_number, reverse=True)

    async def find_execution_tx_hash(self, index: int) -> str:
        try:
            logs = await self._status_logs_newest_first(index)
        except Exception as exc:
            logger.warning("execution_tx_scan_failed", index=index, error=str(exc))
            return ""

        for log in logs:
            try:
                event = decode_status_updated(log)
            except EventDecodeError as exc:
                logger.warning("status_log_decode_failed", index=index, error=str(exc))
                continue
            if map_status_code(event.status) == ProposalStatus.EXECUTED.value:
                return log.transaction_hash
        return ""

    async def find_event_date(self, status: str, index: int) -> str:
        """Date of the newest status change that moved the proposal into ``status``."""
        try:
            logs = await self._status_logs_newest_first(index)
            for log in logs:
                event = decode_status_updated(log)
                if map_status_code(event.status) != status:
                    continue
                timestamp = await self._client.block_timestamp(log.block_number)
                return format_event_date(int(timestamp))
        except Exception as exc:
            logger.error("event_date_fetch_failed", index=index, status=status, error=str(exc))
            return EVENT_DATE_ERROR

        logger.warning("status_event_not_found", index=index, status=status)
        return EVENT_NOT_FOUND
