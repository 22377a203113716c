from __future__ import annotations

from enum import StrEnum


class ProposalStatus(StrEnum):
    ACTIVE = "active"
    SCHEDULED = "scheduled"
    EXECUTED = "executed"
    COMPLETED = "completed"
    CANCELED = "canceled"


INEXISTENT_STATUS = "inexistent status"

STATUS_BY_CODE: dict[int, ProposalStatus] = {
    0: ProposalStatus.ACTIVE,
    1: ProposalStatus.SCHEDULED,
    2: ProposalStatus.EXECUTED,
    3: ProposalStatus.COMPLETED,
    4: ProposalStatus.CANCELED,
}

TERMINAL_STATUSES: frozenset[ProposalStatus] = frozenset(
    {
        ProposalStatus.EXECUTED,
        ProposalStatus.COMPLETED,
        ProposalStatus.CANCELED,
    }
)

ALLOWED_TRANSITIONS: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.ACTIVE: frozenset({ProposalStatus.SCHEDULED, ProposalStatus.CANCELED}),
    ProposalStatus.SCHEDULED: frozenset(
        {ProposalStatus.EXECUTED, ProposalStatus.COMPLETED, ProposalStatus.CANCELED}
    ),
    ProposalStatus.EXECUTED: frozenset(),
    ProposalStatus.COMPLETED: frozenset(),
    ProposalStatus.CANCELED: frozenset(),
}


def map_status_code(code: object) -> str:
    """Map a contract status code to its canonical name.

    Total: anything outside 0-4 (bools and non-integers included) yields
    ``"inexistent status"``.
    """
    if isinstance(code, bool) or not isinstance(code, int):
        return INEXISTENT_STATUS
    status = STATUS_BY_CODE.get(code)
    return status.value if status is not None else INEXISTENT_STATUS


def coerce_status(raw_status: str) -> ProposalStatus | None:
    try:
        return ProposalStatus(raw_status.strip().lower())
    except ValueError:
        return None


def is_terminal_status(status: str) -> bool:
    resolved = coerce_status(status)
    return resolved is not None and resolved in TERMINAL_STATUSES


def can_transition(current: ProposalStatus, target: ProposalStatus) -> bool:
    """True when ``target`` is reachable from ``current``, possibly skipping unobserved steps."""
    reachable = {current}
    pending = [current]
    while pending:
        for following in ALLOWED_TRANSITIONS[pending.pop()]:
            if following not in reachable:
                reachable.add(following)
                pending.append(following)
    return target in reachable
