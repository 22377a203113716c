from __future__ import annotations

import pytest

from governance_sync.domain.eligibility import NOT_ELIGIBLE, Eligibility, evaluate_eligibility

END = 1_000


def test_open_vote_reports_nothing() -> None:
    assert evaluate_eligibility(999, END, "active", 100, 90, 10) == NOT_ELIGIBLE


def test_missed_quorum_is_invalid_and_cancelable() -> None:
    result = evaluate_eligibility(1_001, END, "active", 5, 5, 10)

    assert result == Eligibility(cancelable=True, proposal_invalid=True)


def test_majority_for_is_schedulable() -> None:
    result = evaluate_eligibility(2_000, END, "active", 20, 15, 10)

    assert result == Eligibility(schedulable=True)


def test_majority_against_is_rejected() -> None:
    result = evaluate_eligibility(2_000, END, "active", 20, 5, 10)

    assert result == Eligibility(cancelable=True, proposal_rejected=True)


def test_tie_is_rejected() -> None:
    result = evaluate_eligibility(2_000, END, "active", 20, 10, 10)

    assert result.proposal_rejected
    assert result.cancelable
    assert not result.schedulable


def test_quorum_exactly_met_counts_as_reached() -> None:
    result = evaluate_eligibility(2_000, END, "active", 10, 10, 10)

    assert result == Eligibility(schedulable=True)


def test_vote_closing_at_now_is_evaluated() -> None:
    assert evaluate_eligibility(END, END, "active", 20, 15, 10).schedulable


def test_canceled_proposals_are_reevaluated() -> None:
    result = evaluate_eligibility(2_000, END, "canceled", 5, 5, 10)

    assert result.proposal_invalid


@pytest.mark.parametrize("status", ["scheduled", "executed", "completed", "inexistent status"])
def test_settled_statuses_are_never_eligible(status: str) -> None:
    assert evaluate_eligibility(2_000, END, status, 20, 15, 10) == NOT_ELIGIBLE


def test_flags_are_mutually_consistent() -> None:
    for votes_total in range(0, 25, 3):
        for votes_for in range(0, votes_total + 1):
            result = evaluate_eligibility(2_000, END, "active", votes_total, votes_for, 10)
            assert not (result.schedulable and result.cancelable)
            assert not (result.proposal_invalid and result.proposal_rejected)
            if result.proposal_invalid or result.proposal_rejected:
                assert result.cancelable
