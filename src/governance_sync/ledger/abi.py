from __future__ import annotations

from typing import Any

from eth_utils import keccak

PROPOSED_EVENT_SIGNATURE = "Proposed(uint256,address,string,uint256,uint256,address,bool)"
STATUS_UPDATED_EVENT_SIGNATURE = "StatusUpdated(uint256,uint8)"

PROPOSED_TOPIC: bytes = keccak(text=PROPOSED_EVENT_SIGNATURE)
STATUS_UPDATED_TOPIC: bytes = keccak(text=STATUS_UPDATED_EVENT_SIGNATURE)

# non-indexed event arguments, in declaration order
PROPOSED_DATA_TYPES: tuple[str, ...] = ("string", "uint256", "uint256", "address", "bool")
STATUS_UPDATED_DATA_TYPES: tuple[str, ...] = ("uint8",)


def _output(name: str, type_: str) -> dict[str, str]:
    return {"name": name, "type": type_, "internalType": type_}


GOVERNOR_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getProposalIndex",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [_output("", "uint256")],
    },
    {
        "type": "function",
        "name": "getProposal",
        "stateMutability": "view",
        "inputs": [_output("index", "uint256")],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "internalType": "struct GovernorResearch.Proposal",
                "components": [
                    _output("info", "string"),
                    _output("startTimestamp", "uint256"),
                    _output("endTimestamp", "uint256"),
                    _output("status", "uint8"),
                    _output("action", "address"),
                    _output("votesFor", "uint256"),
                    _output("votesAgainst", "uint256"),
                    _output("votesTotal", "uint256"),
                    _output("quorumSnapshot", "uint256"),
                    _output("executable", "bool"),
                    _output("quadraticVoting", "bool"),
                ],
            }
        ],
    },
    {
        "type": "function",
        "name": "getGovernanceParameters",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "internalType": "struct GovernorResearch.GovernanceParameters",
                "components": [
                    _output("proposalLifetime", "uint256"),
                    _output("quorum", "uint256"),
                    _output("voteLockTime", "uint256"),
                    _output("proposeLockTime", "uint256"),
                    _output("voteChangeTime", "uint256"),
                    _output("voteChangeCutOff", "uint256"),
                    _output("ddThreshold", "uint256"),
                ],
            }
        ],
    },
]
