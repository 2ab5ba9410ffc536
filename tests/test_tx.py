"""Tests for transaction request validation and encoding."""

from __future__ import annotations

import pytest

from frame_client.errors import TransactionInvalid
from frame_client.tx import TransactionRequest

TO = "0x" + "ab" * 20


class TestValidate:
    def test_plain_transfer(self):
        TransactionRequest(to=TO, value=1).validate()

    def test_missing_to(self):
        with pytest.raises(TransactionInvalid) as excinfo:
            TransactionRequest(value=1).validate()
        assert "to" in str(excinfo.value)
        assert excinfo.value.step == "validate"

    def test_contract_creation_needs_data(self):
        with pytest.raises(TransactionInvalid):
            TransactionRequest(contract_creation=True).validate()

    def test_contract_creation_forbids_to(self):
        with pytest.raises(TransactionInvalid):
            TransactionRequest(to=TO, data="0x6080", contract_creation=True).validate()

    @pytest.mark.parametrize("value", [1.0, True, "1"])
    def test_quantities_must_be_ints(self, value):
        with pytest.raises(TransactionInvalid) as excinfo:
            TransactionRequest(to=TO, value=value).validate()
        assert excinfo.value.errors == [f"value: {value!r} is not an int"]

    def test_collects_schema_errors(self):
        tx = TransactionRequest(to="0x1234", value=-1, data="0xabc")
        with pytest.raises(TransactionInvalid) as excinfo:
            tx.validate()
        assert len(excinfo.value.errors) == 3


class TestFromDict:
    def test_camel_case_and_hex_quantities(self):
        tx = TransactionRequest.from_dict(
            {"to": TO, "from": TO, "gasPrice": "0x3b9aca00", "maxFeePerGas": 2, "chainId": "0xa"}
        )
        assert tx.from_address == TO
        assert tx.gas_price == 1_000_000_000
        assert tx.max_fee_per_gas == 2
        assert tx.chain_id == 10

    def test_bytes_data(self):
        tx = TransactionRequest.from_dict({"to": TO, "data": b"\x12\x34"})
        assert tx.data == "0x1234"

    def test_unknown_field(self):
        with pytest.raises(TransactionInvalid):
            TransactionRequest.from_dict({"to": TO, "gasLimit": 21000})

    def test_bad_hex_quantity(self):
        with pytest.raises(TransactionInvalid):
            TransactionRequest.from_dict({"to": TO, "value": "lots"})


class TestEncoding:
    def test_to_rpc_hex_encodes_quantities(self):
        tx = TransactionRequest(to=TO, from_address=TO, value=0, nonce=7, data="0xABCD")
        assert tx.to_rpc() == {"to": TO, "from": TO, "value": "0x0", "nonce": "0x7", "data": "0xabcd"}

    def test_with_chain_id_only_fills_missing(self):
        assert TransactionRequest(to=TO).with_chain_id(10).chain_id == 10
        assert TransactionRequest(to=TO, chain_id=1).with_chain_id(10).chain_id == 1
