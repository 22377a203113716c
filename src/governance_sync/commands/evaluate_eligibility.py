from __future__ import annotations

from argparse import Namespace

from governance_sync.commands._runner import failure, parse_non_negative
from governance_sync.config import AppSettings
from governance_sync.domain.eligibility import evaluate_eligibility
from governance_sync.types import CommandResult, CommandStatus

COMMAND = "evaluate-eligibility"

_INTEGER_ARGUMENTS = ("now", "end_time", "votes_total", "votes_for", "quorum")


def run_evaluate_eligibility(args: Namespace, _: AppSettings) -> CommandResult:
    values: dict[str, int] = {}
    for name in _INTEGER_ARGUMENTS:
        try:
            values[name] = parse_non_negative(getattr(args, name, None), name)
        except ValueError as exc:
            return failure(COMMAND, str(exc))

    if values["votes_for"] > values["votes_total"]:
        return failure(COMMAND, "votes_for cannot exceed votes_total")

    status = str(getattr(args, "status", "")).strip().lower()
    if not status:
        return failure(COMMAND, "status is required")

    eligibility = evaluate_eligibility(
        values["now"],
        values["end_time"],
        status,
        values["votes_total"],
        values["votes_for"],
        values["quorum"],
    )
    return CommandResult(
        command=COMMAND,
        status=CommandStatus.OK,
        details={"status": status, **eligibility.as_dict()},
    )
