from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

JsonDict = dict[str, Any]


class CommandStatus(StrEnum):
    OK = "ok"
    DEGRADED = "degraded"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class GovernanceTrack(StrEnum):
    RESEARCH = "research"
    OPERATIONS = "operations"

    @property
    def key_prefix(self) -> str:
        return "res" if self is GovernanceTrack.RESEARCH else "ops"

    def proposal_key(self, index: int) -> str:
        return f"proposal_{self.key_prefix}_{index}"

    @property
    def index_set_key(self) -> str:
        return f"{self.value}_sc_indices"

    @property
    def proposal_key_pattern(self) -> str:
        return f"proposal_{self.key_prefix}_*"


@dataclass(slots=True, frozen=True)
class CommandResult:
    command: str
    status: CommandStatus
    details: JsonDict = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {
            "command": self.command,
            "status": self.status.value,
            "details": self.details,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
