"""Tests for ABI helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from eth_abi import encode

from frame_client.abi import (
    decode_function_result,
    encode_function_call,
    function_selector,
    load_abi,
)

ERC20_ABI = [
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "getReserves",
        "inputs": [],
        "outputs": [
            {"name": "reserve0", "type": "uint112"},
            {"name": "reserve1", "type": "uint112"},
        ],
    },
    {
        "type": "function",
        "name": "quote",
        "inputs": [
            {
                "name": "order",
                "type": "tuple",
                "components": [{"name": "amount", "type": "uint256"}, {"name": "to", "type": "address"}],
            }
        ],
        "outputs": [],
    },
]


def test_known_selectors():
    assert function_selector("balanceOf", ["address"]).hex() == "70a08231"
    assert function_selector("transfer", ["address", "uint256"]).hex() == "a9059cbb"


def test_encode_call_prefixes_selector():
    account = "0x" + "12" * 20
    calldata = encode_function_call(ERC20_ABI, "balanceOf", [account])
    assert calldata[:4].hex() == "70a08231"
    assert calldata[4:] == encode(["address"], [account])


def test_encode_tuple_argument():
    calldata = encode_function_call(ERC20_ABI, "quote", [(5, "0x" + "34" * 20)])
    assert calldata[:4] == function_selector("quote", ["(uint256,address)"])


def test_encode_checks_argument_count():
    with pytest.raises(ValueError):
        encode_function_call(ERC20_ABI, "balanceOf", [])


def test_unknown_function():
    with pytest.raises(ValueError):
        encode_function_call(ERC20_ABI, "approve", [])


def test_decode_single_and_multiple_outputs():
    assert decode_function_result(ERC20_ABI, "balanceOf", encode(["uint256"], [7])) == 7
    raw = "0x" + encode(["uint112", "uint112"], [1, 2]).hex()
    assert decode_function_result(ERC20_ABI, "getReserves", raw) == (1, 2)
    assert decode_function_result(ERC20_ABI, "quote", b"") is None


def test_load_abi_from_artifact(tmp_path: Path):
    path = tmp_path / "Token.json"
    path.write_text(json.dumps({"contractName": "Token", "abi": ERC20_ABI}), encoding="utf-8")
    assert load_abi(path) == ERC20_ABI


def test_load_abi_without_abi(tmp_path: Path):
    path = tmp_path / "Token.json"
    path.write_text(json.dumps({"bytecode": "0x"}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_abi(path)
