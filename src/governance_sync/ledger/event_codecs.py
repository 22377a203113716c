from __future__ import annotations

from dataclasses import dataclass

from eth_abi import decode, encode

from governance_sync.ledger.abi import (
    PROPOSED_DATA_TYPES,
    PROPOSED_TOPIC,
    STATUS_UPDATED_DATA_TYPES,
    STATUS_UPDATED_TOPIC,
)
from governance_sync.ledger.addresses import address_from_topic
from governance_sync.ledger.client import LogEntry, index_topic


class EventDecodeError(ValueError):
    pass


@dataclass(slots=True, frozen=True)
class ProposedEvent:
    index: int
    user: str
    info: str
    start_timestamp: int
    end_timestamp: int
    action: str
    executable: bool

    def topics(self) -> tuple[bytes, ...]:
        user_topic = bytes(12) + bytes.fromhex(self.user.removeprefix("0x"))
        return (PROPOSED_TOPIC, index_topic(self.index), user_topic)

    def encode_data(self) -> bytes:
        return encode(
            list(PROPOSED_DATA_TYPES),
            [self.info, self.start_timestamp, self.end_timestamp, self.action, self.executable],
        )


@dataclass(slots=True, frozen=True)
class StatusUpdatedEvent:
    proposal_id: int
    status: int

    def topics(self) -> tuple[bytes, ...]:
        return (STATUS_UPDATED_TOPIC, index_topic(self.proposal_id))

    def encode_data(self) -> bytes:
        return encode(list(STATUS_UPDATED_DATA_TYPES), [self.status])


def _require_topics(log: LogEntry, signature_topic: bytes, count: int) -> None:
    if len(log.topics) < count:
        raise EventDecodeError(f"expected {count} topics, got {len(log.topics)}")
    if log.topics[0] != signature_topic:
        raise EventDecodeError("log signature does not match event")


def decode_proposed(log: LogEntry) -> ProposedEvent:
    _require_topics(log, PROPOSED_TOPIC, 3)
    try:
        info, start, end, action, executable = decode(list(PROPOSED_DATA_TYPES), log.data)
        user = address_from_topic(log.topics[2])
    except Exception as exc:
        raise EventDecodeError(f"malformed Proposed log: {exc}") from exc

    return ProposedEvent(
        index=int.from_bytes(log.topics[1], byteorder="big"),
        user=user,
        info=info,
        start_timestamp=int(start),
        end_timestamp=int(end),
        action=str(action),
        executable=bool(executable),
    )


def decode_status_updated(log: LogEntry) -> StatusUpdatedEvent:
    _require_topics(log, STATUS_UPDATED_TOPIC, 2)
    try:
        (status,) = decode(list(STATUS_UPDATED_DATA_TYPES), log.data)
    except Exception as exc:
        raise EventDecodeError(f"malformed StatusUpdated log: {exc}") from exc

    return StatusUpdatedEvent(
        proposal_id=int.from_bytes(log.topics[1], byteorder="big"),
        status=int(status),
    )
