from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from eth_utils import to_hex
from web3 import AsyncWeb3

from governance_sync.ledger.abi import GOVERNOR_ABI
from governance_sync.ledger.addresses import ZERO_ADDRESS, normalize_address


@dataclass(slots=True, frozen=True)
class LogEntry:
    block_number: int
    transaction_hash: str
    topics: tuple[bytes, ...]
    data: bytes


class LedgerClient(Protocol):
    """Read-only view of the governor contract and its event history."""

    async def proposal_count(self) -> int:
        ...

    async def read_proposal(self, index: int) -> Sequence[Any]:
        ...

    async def governance_parameters(self) -> Sequence[Any]:
        ...

    async def get_logs(self, topic: bytes, index: int) -> list[LogEntry]:
        ...

    async def block_timestamp(self, block: int | str = "latest") -> int:
        ...


def index_topic(index: int) -> bytes:
    return int(index).to_bytes(32, byteorder="big", signed=False)


def _to_log_entry(raw_log: Any) -> LogEntry:
    return LogEntry(
        block_number=int(raw_log["blockNumber"]),
        transaction_hash=to_hex(raw_log["transactionHash"]),
        topics=tuple(bytes(topic) for topic in raw_log["topics"]),
        data=bytes(raw_log["data"]),
    )


class Web3LedgerClient:
    def __init__(self, web3: AsyncWeb3, governor_address: str) -> None:
        self._web3 = web3
        self._address = normalize_address(governor_address, field_name="governor_address")
        if self._address == ZERO_ADDRESS:
            raise ValueError("governor_address is not configured")
        self._contract = web3.eth.contract(address=self._address, abi=GOVERNOR_ABI)

    @property
    def address(self) -> str:
        return self._address

    async def proposal_count(self) -> int:
        return int(await self._contract.functions.getProposalIndex().call())

    async def read_proposal(self, index: int) -> Sequence[Any]:
        return await self._contract.functions.getProposal(int(index)).call()

    async def governance_parameters(self) -> Sequence[Any]:
        return await self._contract.functions.getGovernanceParameters().call()

    async def get_logs(self, topic: bytes, index: int) -> list[LogEntry]:
        raw_logs = await self._web3.eth.get_logs(
            {
                "address": self._address,
                "topics": [to_hex(topic), to_hex(index_topic(index))],
                "fromBlock": 0,
                "toBlock": "latest",
            }
        )
        return [_to_log_entry(raw_log) for raw_log in raw_logs]

    async def block_timestamp(self, block: int | str = "latest") -> int:
        raw_block = await self._web3.eth.get_block(block)
        return int(raw_block["timestamp"])
