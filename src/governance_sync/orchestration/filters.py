from __future__ import annotations

from dataclasses import dataclass

from governance_sync.domain.dates import parse_day, parse_filter_date
from governance_sync.domain.proposal_record import ProposalRecord
from governance_sync.observability.logging import get_logger

logger = get_logger("proposal_filters")

ALL = "all"


@dataclass(slots=True, frozen=True)
class ProposalFilter:
    status: str = ALL
    execution_type: str = ALL
    start_date: str | None = None
    end_date: str | None = None

    def matches_status(self, record: ProposalRecord) -> bool:
        return self.status == ALL or record.status.lower() == self.status.lower()

    def matches_type(self, record: ProposalRecord) -> bool:
        return (
            self.execution_type == ALL
            or record.execution_option.lower() == self.execution_type.lower()
        )

    def matches_date_range(self, record: ProposalRecord) -> bool:
        """Inclusive day-range check on the proposal start date.

        A record whose dates cannot be compared is kept rather than dropped.
        """
        if not self.start_date and not self.end_date:
            return True
        try:
            proposal_day = parse_day(record.proposal_start_date)
            if self.start_date and proposal_day < parse_filter_date(self.start_date):
                return False
            if self.end_date and proposal_day > parse_filter_date(self.end_date):
                return False
        except ValueError as exc:
            logger.warning("date_comparison_failed", index=record.index, error=str(exc))
            return True
        return True

    def matches(self, record: ProposalRecord) -> bool:
        return (
            self.matches_status(record)
            and self.matches_type(record)
            and self.matches_date_range(record)
        )


def apply_filter(records: list[ProposalRecord], proposal_filter: ProposalFilter) -> list[ProposalRecord]:
    matching = [record for record in records if proposal_filter.matches(record)]
    return sorted(matching, key=lambda record: record.index, reverse=True)
