"""
ABI helpers for read-only contract calls.

Uses eth-abi for argument encoding and eth-hash for the Keccak-256 selector.
ABIs are plain lists of entries, as found in compiler artifacts
(``load_abi`` reads either a bare ABI list or an artifact with an ``abi`` key).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_hash.auto import keccak

from .utils import from_data


def load_abi(path: Path) -> list[dict[str, Any]]:
    """
    Load an ABI from a JSON file.

    Args:
        path: ABI JSON (list) or compiler artifact (object with "abi")

    Returns:
        ABI as a list of dicts
    """
    with path.open("r", encoding="utf-8") as f:
        artifact = json.load(f)
    if isinstance(artifact, dict):
        artifact = artifact.get("abi")
    if not isinstance(artifact, list):
        raise ValueError(f"No ABI found in {path}")
    return artifact


def function_entry(abi: Sequence[dict[str, Any]], function_name: str) -> dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function_name:
            return entry
    raise ValueError(f"Function {function_name} not found in ABI")


def _type_string(param: dict[str, Any]) -> str:
    kind = param["type"]
    if kind.startswith("tuple"):
        inner = ",".join(_type_string(c) for c in param.get("components", []))
        return f"({inner}){kind[len('tuple'):]}"
    return kind


def function_selector(function_name: str, input_types: Sequence[str]) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    signature = f"{function_name}({','.join(input_types)})"
    return keccak(signature.encode("utf-8"))[:4]


def encode_function_call(abi: Sequence[dict[str, Any]], function_name: str, args: Sequence[Any]) -> bytes:
    """ABI-encode a function call to calldata bytes."""
    func = function_entry(abi, function_name)
    input_types = [_type_string(inp) for inp in func.get("inputs", [])]
    if len(args) != len(input_types):
        raise ValueError(
            f"{function_name} takes {len(input_types)} argument(s), got {len(args)}"
        )
    encoded_args = encode(input_types, list(args)) if input_types else b""
    return function_selector(function_name, input_types) + encoded_args


def decode_function_result(abi: Sequence[dict[str, Any]], function_name: str, data: bytes | str) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        None for functions without outputs, the bare value for a single
        output, otherwise a tuple
    """
    func = function_entry(abi, function_name)
    output_types = [_type_string(out) for out in func.get("outputs", [])]
    if not output_types:
        return None

    raw = from_data(data) if isinstance(data, str) else data
    decoded = decode(output_types, raw)

    if len(decoded) == 1:
        return decoded[0]
    return decoded
