from __future__ import annotations

from argparse import Namespace

from governance_sync.commands._runner import run_with_services
from governance_sync.config import AppSettings
from governance_sync.runtime.services import SyncServices
from governance_sync.types import CommandResult, CommandStatus

COMMAND = "governance-parameters"


async def governance_parameters(services: SyncServices, _: Namespace) -> CommandResult:
    parameters = await services.reader.read_governance_parameters()
    return CommandResult(command=COMMAND, status=CommandStatus.OK, details=parameters.as_dict())


def run_governance_parameters(args: Namespace, settings: AppSettings) -> CommandResult:
    return run_with_services(COMMAND, governance_parameters, args, settings)
