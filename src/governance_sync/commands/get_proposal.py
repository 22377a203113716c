from __future__ import annotations

from argparse import Namespace

from governance_sync.commands._runner import failure, parse_non_negative, run_with_services
from governance_sync.config import AppSettings
from governance_sync.runtime.services import SyncServices
from governance_sync.types import CommandResult, CommandStatus

COMMAND = "get-proposal"


async def get_proposal(services: SyncServices, args: Namespace) -> CommandResult:
    try:
        index = parse_non_negative(getattr(args, "index", None), "index")
    except ValueError as exc:
        return failure(COMMAND, str(exc))

    if not getattr(args, "refresh", False):
        record = await services.synchronizer.get_proposal(index)
        return CommandResult(command=COMMAND, status=CommandStatus.OK, details=record.as_dict())

    result = await services.refresher.refresh(index)
    if result.success:
        return CommandResult(command=COMMAND, status=CommandStatus.OK, details=result.as_dict())

    status = CommandStatus.NOT_FOUND if "does not exist" in (result.reason or "") else CommandStatus.FAILED
    return CommandResult(command=COMMAND, status=status, details=result.as_dict())


def run_get_proposal(args: Namespace, settings: AppSettings) -> CommandResult:
    return run_with_services(COMMAND, get_proposal, args, settings)
