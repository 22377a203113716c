"""Schedule/cancel eligibility for a proposal whose voting window may be over."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from governance_sync.domain.status import ProposalStatus

_REEVALUATED_STATUSES: frozenset[str] = frozenset(
    {ProposalStatus.ACTIVE.value, ProposalStatus.CANCELED.value}
)


@dataclass(slots=True, frozen=True)
class Eligibility:
    schedulable: bool = False
    cancelable: bool = False
    proposal_invalid: bool = False
    proposal_rejected: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "schedulable": self.schedulable,
            "cancelable": self.cancelable,
            "proposal_invalid": self.proposal_invalid,
            "proposal_rejected": self.proposal_rejected,
        }


NOT_ELIGIBLE = Eligibility()


def evaluate_eligibility(
    now: int,
    end_time: int,
    status: str,
    votes_total: int,
    votes_for: int,
    quorum: int,
) -> Eligibility:
    """Evaluate whether a closed vote can be scheduled or must be canceled.

    Scheduled, executed and completed proposals are never re-evaluated, and
    nothing is reported while voting is still open. Once closed, a missed
    quorum invalidates the proposal; otherwise strictly more votes for than
    against makes it schedulable and anything else (ties included) rejects it.
    """
    if status not in _REEVALUATED_STATUSES:
        return NOT_ELIGIBLE

    if now < end_time:
        return NOT_ELIGIBLE

    if votes_total < quorum:
        return Eligibility(cancelable=True, proposal_invalid=True)

    votes_against = votes_total - votes_for
    if votes_for > votes_against:
        return Eligibility(schedulable=True)

    return Eligibility(cancelable=True, proposal_rejected=True)
