from __future__ import annotations

from argparse import Namespace

from governance_sync.commands._runner import failure, parse_non_negative, run_with_services
from governance_sync.config import AppSettings
from governance_sync.domain.proposal_record import ExecutionOption, parse_execution_option
from governance_sync.orchestration.filters import ALL
from governance_sync.orchestration.pagination import DEFAULT_PAGE_SIZE, paginate
from governance_sync.runtime.services import SyncServices
from governance_sync.types import CommandResult, CommandStatus

COMMAND = "list-proposals"


async def list_proposals(services: SyncServices, args: Namespace) -> CommandResult:
    try:
        end_index = parse_non_negative(getattr(args, "end_index", 0) or 0, "end_index")
        raw_start = getattr(args, "start_index", None)
        start_index = None if raw_start is None else parse_non_negative(raw_start, "start_index")
        page = parse_non_negative(getattr(args, "page", 1) or 1, "page")
        page_size = parse_non_negative(
            getattr(args, "page_size", DEFAULT_PAGE_SIZE) or DEFAULT_PAGE_SIZE, "page_size"
        )
    except ValueError as exc:
        return failure(COMMAND, str(exc))

    type_filter = getattr(args, "type", ALL) or ALL
    if type_filter != ALL and parse_execution_option(type_filter) is None:
        choices = ", ".join([ALL, *(option.value for option in ExecutionOption)])
        return failure(COMMAND, f"type must be one of: {choices}")

    if start_index is None:
        start_index = await services.reader.proposal_count() - 1
    if start_index < end_index:
        return CommandResult(
            command=COMMAND,
            status=CommandStatus.OK,
            details={"proposals": [], "total_pages": 0, "start_index": start_index},
        )

    records = await services.synchronizer.get_all_proposals(
        start_index,
        end_index,
        status_filter=getattr(args, "status", ALL) or ALL,
        type_filter=type_filter,
        start_date=getattr(args, "start_date", None),
        end_date=getattr(args, "end_date", None),
        fetch_only_new=bool(getattr(args, "only_new", False)),
    )
    listing = paginate(
        records,
        page=page,
        page_size=page_size,
        search_index=getattr(args, "search_index", None),
        content_search=getattr(args, "search", None),
    )
    return CommandResult(
        command=COMMAND,
        status=CommandStatus.OK,
        details={
            "start_index": start_index,
            "end_index": end_index,
            "total_pages": listing.total_pages,
            "proposals": [record.as_dict() for record in listing.records],
        },
    )


def run_list_proposals(args: Namespace, settings: AppSettings) -> CommandResult:
    return run_with_services(COMMAND, list_proposals, args, settings)
