from __future__ import annotations

import re

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_RE = re.compile(r"^0x[0-9a-fA-F]*$")


def to_quantity(value: int) -> str:
    """Encode a non-negative integer as a JSON-RPC hex quantity."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Quantity must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Quantity must be non-negative: {value}")
    return hex(value)


def from_quantity(value: str) -> int:
    if not isinstance(value, str) or not value.startswith(("0x", "0X")) or len(value) < 3:
        raise ValueError(f"Not a hex quantity: {value!r}")
    return int(value, 16)


def to_data(value: bytes | str) -> str:
    """Encode bytes (or pass through 0x-prefixed hex) as JSON-RPC data."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, str):
        if not is_hex(value) or len(value) % 2:
            raise ValueError(f"Data must be even-length 0x-prefixed hex: {value!r}")
        return value.lower()
    raise TypeError(f"Data must be bytes or hex str, got {type(value).__name__}")


def from_data(value: str) -> bytes:
    if not is_hex(value) or len(value) % 2:
        raise ValueError(f"Not hex data: {value!r}")
    return bytes.fromhex(value[2:])


def is_hex(value: object) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def is_address(value: object) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))
