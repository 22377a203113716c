from __future__ import annotations

import json
from argparse import ArgumentParser, Namespace
from collections.abc import Callable, Sequence

from governance_sync.commands import (
    run_cache_health,
    run_evaluate_eligibility,
    run_get_proposal,
    run_governance_parameters,
    run_invalidate_cache,
    run_list_proposals,
)
from governance_sync.config import AppSettings, get_settings
from governance_sync.domain.proposal_record import ExecutionOption
from governance_sync.domain.status import ProposalStatus
from governance_sync.observability.logging import configure_logging
from governance_sync.orchestration.filters import ALL
from governance_sync.orchestration.pagination import DEFAULT_PAGE_SIZE
from governance_sync.types import CommandResult, CommandStatus

CommandHandler = Callable[[Namespace, AppSettings], CommandResult]

COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "list-proposals": run_list_proposals,
    "get-proposal": run_get_proposal,
    "evaluate-eligibility": run_evaluate_eligibility,
    "invalidate-cache": run_invalidate_cache,
    "cache-health": run_cache_health,
    "governance-parameters": run_governance_parameters,
}


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="governance-sync", description="Governance proposal sync CLI")
    parser.add_argument("--json", action="store_true", help="emit machine-readable JSON output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    listing = subparsers.add_parser("list-proposals")
    listing.add_argument("--start-index", type=int, default=None)
    listing.add_argument("--end-index", type=int, default=0)
    listing.add_argument(
        "--status",
        default=ALL,
        choices=[ALL, *(status.value for status in ProposalStatus)],
    )
    listing.add_argument(
        "--type",
        default=ALL,
        help=f"execution option, one of: {', '.join(option.value for option in ExecutionOption)}",
    )
    listing.add_argument("--start-date", default=None, help="ISO date, inclusive")
    listing.add_argument("--end-date", default=None, help="ISO date, inclusive")
    listing.add_argument("--only-new", action="store_true")
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)
    listing.add_argument("--search-index", default=None)
    listing.add_argument("--search", default=None)

    single = subparsers.add_parser("get-proposal")
    single.add_argument("--index", required=True, type=int)
    single.add_argument("--refresh", action="store_true")

    eligibility = subparsers.add_parser("evaluate-eligibility")
    eligibility.add_argument("--now", required=True, type=int)
    eligibility.add_argument("--end-time", required=True, type=int)
    eligibility.add_argument(
        "--status",
        required=True,
        choices=[status.value for status in ProposalStatus],
    )
    eligibility.add_argument("--votes-total", required=True, type=int)
    eligibility.add_argument("--votes-for", required=True, type=int)
    eligibility.add_argument("--quorum", required=True, type=int)

    invalidate = subparsers.add_parser("invalidate-cache")
    scope = invalidate.add_mutually_exclusive_group(required=False)
    scope.add_argument("--index", type=int, default=None)
    scope.add_argument("--new-index", type=int, default=None)
    scope.add_argument("--active", action="store_true", default=False)

    subparsers.add_parser("cache-health")
    subparsers.add_parser("governance-parameters")

    return parser


def _emit_result(result: CommandResult, *, as_json: bool) -> None:
    if as_json:
        print(result.to_json())
        return

    print(f"{result.command}: {result.status.value}")
    if result.details:
        print(json.dumps(result.details, indent=2, sort_keys=True))


def entrypoint(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)

    handler = COMMAND_HANDLERS[str(args.command)]
    result = handler(args, settings)
    _emit_result(result, as_json=bool(args.json))
    return 0 if result.status in (CommandStatus.OK, CommandStatus.DEGRADED) else 1


if __name__ == "__main__":
    raise SystemExit(entrypoint())
