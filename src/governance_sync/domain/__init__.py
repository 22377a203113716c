"""Domain models for governance proposal state."""

from governance_sync.domain.eligibility import Eligibility, evaluate_eligibility
from governance_sync.domain.proposal_record import (
    EVENT_DATE_ERROR,
    EVENT_NOT_FOUND,
    ExecutionOption,
    ProposalRecord,
    parse_execution_option,
)
from governance_sync.domain.status import (
    TERMINAL_STATUSES,
    ProposalStatus,
    can_transition,
    is_terminal_status,
    map_status_code,
)

__all__ = [
    "EVENT_DATE_ERROR",
    "EVENT_NOT_FOUND",
    "Eligibility",
    "evaluate_eligibility",
    "ExecutionOption",
    "ProposalRecord",
    "parse_execution_option",
    "ProposalStatus",
    "TERMINAL_STATUSES",
    "can_transition",
    "is_terminal_status",
    "map_status_code",
]
