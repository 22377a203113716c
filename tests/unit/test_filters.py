from __future__ import annotations

from conftest import make_record

from governance_sync.orchestration.filters import ProposalFilter, apply_filter


def test_default_filter_keeps_everything_sorted_descending() -> None:
    records = [make_record(index=1), make_record(index=3), make_record(index=2)]

    result = apply_filter(records, ProposalFilter())

    assert [record.index for record in result] == [3, 2, 1]


def test_status_filter() -> None:
    records = [
        make_record(index=1),
        make_record(index=2, status="executed", schedulable=False),
    ]

    result = apply_filter(records, ProposalFilter(status="executed"))

    assert [record.index for record in result] == [2]


def test_type_filter_is_case_insensitive() -> None:
    records = [make_record(index=1), make_record(index=2, execution_option="Election")]

    result = apply_filter(records, ProposalFilter(execution_type="election"))

    assert [record.index for record in result] == [2]


def test_date_range_is_inclusive() -> None:
    record = make_record(proposal_start_date="May 22, 2024 UTC")

    assert ProposalFilter(start_date="2024-05-22", end_date="2024-05-22").matches(record)
    assert not ProposalFilter(start_date="2024-05-23").matches(record)
    assert not ProposalFilter(end_date="2024-05-21").matches(record)


def test_unparseable_dates_fail_open() -> None:
    record = make_record(proposal_start_date="N/A")

    assert ProposalFilter(start_date="2024-05-23").matches(record)
    assert ProposalFilter(start_date="not a date").matches(make_record())
