from __future__ import annotations

import asyncio
from argparse import Namespace
from collections.abc import Awaitable, Callable

from governance_sync.config import AppSettings
from governance_sync.errors import GovernanceSyncError, ProposalNotFoundError
from governance_sync.observability.logging import get_logger
from governance_sync.runtime.services import SyncServices, open_services
from governance_sync.types import CommandResult, CommandStatus

ServiceCommand = Callable[[SyncServices, Namespace], Awaitable[CommandResult]]

logger = get_logger("commands")


def failure(command: str, error: str, status: CommandStatus = CommandStatus.FAILED) -> CommandResult:
    return CommandResult(command=command, status=status, details={"error": error})


def parse_non_negative(raw_value: object, field_name: str) -> int:
    if isinstance(raw_value, bool):
        raise ValueError(f"{field_name} must be an integer")
    try:
        value = int(raw_value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer") from exc
    if value < 0:
        raise ValueError(f"{field_name} must be non-negative")
    return value


async def _run(command: str, handler: ServiceCommand, args: Namespace, settings: AppSettings) -> CommandResult:
    async with open_services(settings) as services:
        return await asyncio.wait_for(handler(services, args), timeout=settings.command_timeout_seconds)


def run_with_services(
    command: str,
    handler: ServiceCommand,
    args: Namespace,
    settings: AppSettings,
) -> CommandResult:
    try:
        return asyncio.run(_run(command, handler, args, settings))
    except ProposalNotFoundError as exc:
        return failure(command, str(exc), CommandStatus.NOT_FOUND)
    except TimeoutError:
        logger.error("command_timed_out", command=command, timeout=settings.command_timeout_seconds)
        return failure(command, f"timed out after {settings.command_timeout_seconds}s")
    except (GovernanceSyncError, ValueError) as exc:
        logger.error("command_failed", command=command, error=str(exc))
        return failure(command, str(exc))
