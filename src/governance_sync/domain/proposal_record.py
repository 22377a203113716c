from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from enum import StrEnum
from typing import Any

from governance_sync.domain.eligibility import Eligibility
from governance_sync.domain.status import ProposalStatus, is_terminal_status

EVENT_NOT_FOUND = "Event not found"
EVENT_DATE_ERROR = "Error fetching date"


class ExecutionOption(StrEnum):
    TRANSACTION = "Transaction"
    ELECTION = "Election"
    IMPEACHMENT = "Impeachment"
    PARAMETER_CHANGE = "ParameterChange"
    NOT_EXECUTABLE = "NotExecutable"


def parse_execution_option(raw_value: str) -> ExecutionOption | None:
    wanted = raw_value.strip().lower()
    for option in ExecutionOption:
        if option.value.lower() == wanted:
            return option
    return None


@dataclass(slots=True, frozen=True)
class ProposalRecord:
    index: int
    proposer: str
    content_pointer: str
    title: str
    body: str
    summary: str
    execution_option: str
    start_timestamp: int
    end_timestamp: int
    status: str
    action: str
    votes_for: int
    votes_against: int
    votes_total: int
    quorum_snapshot: int
    executable: bool
    quadratic_voting: bool
    proposal_start_date: str
    proposal_end_date: str
    start_date_with_time: str
    end_date_with_time: str
    execution_tx_hash: str
    event_date: str
    schedulable: bool
    cancelable: bool
    proposal_invalid: bool
    proposal_rejected: bool

    @property
    def is_terminal(self) -> bool:
        return is_terminal_status(self.status)

    @property
    def eligibility(self) -> Eligibility:
        return Eligibility(
            schedulable=self.schedulable,
            cancelable=self.cancelable,
            proposal_invalid=self.proposal_invalid,
            proposal_rejected=self.proposal_rejected,
        )

    def ensure_canonical(self) -> None:
        if self.index < 0:
            raise ValueError("index must be non-negative")
        if self.schedulable and self.cancelable:
            raise ValueError("schedulable and cancelable are mutually exclusive")
        if self.proposal_invalid and self.proposal_rejected:
            raise ValueError("proposal_invalid and proposal_rejected are mutually exclusive")
        if (self.proposal_invalid or self.proposal_rejected) and not self.cancelable:
            raise ValueError("invalid or rejected proposals must be cancelable")
        if self.execution_tx_hash and self.status != ProposalStatus.EXECUTED.value:
            raise ValueError("execution_tx_hash is only set on executed proposals")

    def with_eligibility(self, eligibility: Eligibility) -> ProposalRecord:
        return replace(
            self,
            schedulable=eligibility.schedulable,
            cancelable=eligibility.cancelable,
            proposal_invalid=eligibility.proposal_invalid,
            proposal_rejected=eligibility.proposal_rejected,
        )

    def as_dict(self) -> dict[str, Any]:
        return {field.name: getattr(self, field.name) for field in fields(self)}

    def to_json(self) -> str:
        return json.dumps(self.as_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProposalRecord:
        values: dict[str, Any] = {}
        for field in fields(cls):
            if field.name not in data:
                raise ValueError(f"missing field: {field.name}")
            values[field.name] = _check_type(field.name, field.type, data[field.name])
        record = cls(**values)
        record.ensure_canonical()
        return record

    @classmethod
    def from_json(cls, raw: str | bytes) -> ProposalRecord:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("cached proposal must be a JSON object")
        return cls.from_dict(data)


def _check_type(name: str, annotation: object, value: Any) -> Any:
    # annotations are strings under postponed evaluation
    expected = str(annotation)
    if expected == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be a boolean")
    elif expected == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer")
    elif not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value
