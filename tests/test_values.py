"""Tests for result accessors and frame decoding."""

from __future__ import annotations

import pytest

from frame_client.errors import ProtocolError, ResultShapeError, RpcError
from frame_client.rpc.messages import RpcRequest, RpcResponse, decode_frame, is_notification
from frame_client.rpc.values import (
    expect_address_list,
    expect_chain_id,
    expect_data,
    expect_hash,
    expect_quantity,
    expect_string,
)


class TestAccessors:
    def test_quantity(self):
        assert expect_quantity("0xa4b1") == 42161

    @pytest.mark.parametrize("value", ["42161", 42161, "0x", None, "0xzz"])
    def test_quantity_rejects(self, value):
        with pytest.raises(ResultShapeError):
            expect_quantity(value)

    def test_chain_id_must_be_positive(self):
        with pytest.raises(ResultShapeError):
            expect_chain_id("0x0")

    def test_data(self):
        assert expect_data("0x") == b""
        assert expect_data("0x00ff") == b"\x00\xff"
        with pytest.raises(ResultShapeError):
            expect_data("0x0")

    def test_hash(self):
        tx_hash = "0x" + "cd" * 32
        assert expect_hash(tx_hash) == tx_hash
        with pytest.raises(ResultShapeError):
            expect_hash("0x" + "cd" * 20)

    def test_address_list(self):
        account = "0x" + "12" * 20
        assert expect_address_list([account]) == (account,)
        assert expect_address_list([]) == ()
        with pytest.raises(ResultShapeError):
            expect_address_list(account)
        with pytest.raises(ResultShapeError):
            expect_address_list(["0x12"])

    def test_string(self):
        assert expect_string("0xabc") == "0xabc"
        with pytest.raises(ResultShapeError):
            expect_string("")

    def test_shape_error_is_protocol_error(self):
        assert issubclass(ResultShapeError, ProtocolError)


class TestMessages:
    def test_request_encoding_is_compact(self):
        frame = RpcRequest(7, "eth_chainId").encode()
        assert frame == b'{"jsonrpc":"2.0","id":7,"method":"eth_chainId","params":[]}'

    def test_error_response_unwraps_to_rpc_error(self):
        response = RpcResponse.from_dict({"jsonrpc": "2.0", "id": 1, "error": {"code": 4001, "message": "no"}})
        assert not response.ok
        with pytest.raises(RpcError) as excinfo:
            response.unwrap()
        assert excinfo.value.code == 4001

    def test_null_result_is_a_result(self):
        response = RpcResponse.from_dict({"jsonrpc": "2.0", "id": 1, "result": None})
        assert response.ok
        assert response.unwrap() is None

    def test_error_without_code_is_malformed(self):
        with pytest.raises(ProtocolError):
            RpcResponse.from_dict({"jsonrpc": "2.0", "id": 1, "error": {"message": "??"}})

    def test_decode_frame(self):
        assert decode_frame(b'{"id": 1}') == {"id": 1}
        with pytest.raises(ProtocolError):
            decode_frame(b"\xff\xfe")

    def test_is_notification(self):
        assert is_notification({"jsonrpc": "2.0", "method": "eth_subscription", "params": {}})
        assert not is_notification({"jsonrpc": "2.0", "id": 3, "result": "0x1"})
