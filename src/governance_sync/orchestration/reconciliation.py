from __future__ import annotations

from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.domain.status import can_transition, coerce_status


def reconcile_record(current: ProposalRecord | None, fresh: ProposalRecord) -> ProposalRecord:
    """Pick the record to publish so that a proposal's status never moves backwards.

    A fresh read from a lagging node can report an earlier status than one
    already observed; in that case the observed record wins.
    """
    if current is None or current.index != fresh.index:
        return fresh

    current_status = coerce_status(current.status)
    fresh_status = coerce_status(fresh.status)
    if current_status is None or fresh_status is None:
        return fresh

    if can_transition(current_status, fresh_status):
        return fresh
    return current
