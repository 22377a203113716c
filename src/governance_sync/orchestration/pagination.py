from __future__ import annotations

import math
from dataclasses import dataclass

from governance_sync.domain.proposal_record import ProposalRecord

DEFAULT_PAGE_SIZE = 5


@dataclass(slots=True, frozen=True)
class Page:
    records: list[ProposalRecord]
    total_pages: int


def _matches_content(record: ProposalRecord, term: str) -> bool:
    return any(term in text.lower() for text in (record.title, record.summary, record.body))


def paginate(
    records: list[ProposalRecord],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    search_index: str | None = None,
    content_search: str | None = None,
) -> Page:
    """Slice an already filtered, index-descending listing into one page.

    An index search short-circuits everything else and returns the exact
    match (or nothing for a non-numeric search). Pages past the end are
    clamped to the last page.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    if search_index is not None and search_index.strip():
        try:
            wanted = int(search_index.strip())
        except ValueError:
            return Page(records=[], total_pages=0)
        matches = [record for record in records if record.index == wanted]
        return Page(records=matches, total_pages=max(1, math.ceil(len(matches) / page_size)))

    filtered = list(records)
    if content_search is not None and content_search.strip():
        term = content_search.strip().lower()
        filtered = [record for record in filtered if _matches_content(record, term)]

    total_pages = max(1, math.ceil(len(filtered) / page_size))
    current = min(max(1, page), total_pages)
    start = (current - 1) * page_size
    if start >= len(filtered):
        start = max(0, len(filtered) - page_size)
    return Page(records=filtered[start : start + page_size], total_pages=total_pages)
