from __future__ import annotations

from eth_utils import is_address, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def normalize_address(raw_value: str, *, field_name: str) -> str:
    candidate = raw_value.strip()
    if not candidate:
        raise ValueError(f"{field_name} is required")

    if not is_address(candidate):
        raise ValueError(f"{field_name} must be a valid 20-byte hex address")
    return to_checksum_address(candidate)


def address_from_topic(topic: bytes) -> str:
    """Recover an indexed ``address`` argument from its 32-byte log topic."""
    if len(topic) != 32:
        raise ValueError("address topic must be 32 bytes")
    return to_checksum_address(topic[-20:])
