"""
Typed accessors for JSON-RPC results.

Results arrive as loosely-typed JSON. Each accessor checks the shape one
method is documented to return and converts it, raising
``ResultShapeError`` on mismatch instead of letting a bad value leak into
the session.
"""

from __future__ import annotations

from typing import Any

from ..errors import ResultShapeError
from ..utils import from_data, from_quantity, is_address, is_hex


def expect_quantity(value: Any, what: str = "quantity") -> int:
    """Hex quantity -> int (e.g. ``eth_chainId``)."""
    try:
        return from_quantity(value)
    except ValueError:
        raise ResultShapeError(f"Expected hex {what}, got {value!r}")


def expect_chain_id(value: Any) -> int:
    chain_id = expect_quantity(value, "chain id")
    if chain_id <= 0:
        raise ResultShapeError(f"Chain id must be positive, got {value!r}")
    return chain_id


def expect_data(value: Any, what: str = "data") -> bytes:
    """Hex data -> bytes (e.g. ``eth_call``)."""
    try:
        return from_data(value)
    except ValueError:
        raise ResultShapeError(f"Expected hex {what}, got {value!r}")


def expect_hash(value: Any) -> str:
    """32-byte hash (e.g. ``eth_sendTransaction``)."""
    if not is_hex(value) or len(value) != 66:
        raise ResultShapeError(f"Expected 32-byte hash, got {value!r}")
    return value


def expect_address_list(value: Any) -> tuple[str, ...]:
    """Account list (e.g. ``eth_accounts``)."""
    if not isinstance(value, list):
        raise ResultShapeError(f"Expected account list, got {value!r}")
    for item in value:
        if not is_address(item):
            raise ResultShapeError(f"Expected address in account list, got {item!r}")
    return tuple(value)


def expect_string(value: Any, what: str = "string") -> str:
    if not isinstance(value, str) or not value:
        raise ResultShapeError(f"Expected {what}, got {value!r}")
    return value
