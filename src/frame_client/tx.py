"""
Transaction requests forwarded to the wallet.

Only the structure is checked here: required fields present, addresses and
data well-formed, numeric fields non-negative integers. Gas pricing, nonce
selection and confirmation are the wallet's decisions.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from .errors import SchemaValidationError, TransactionInvalid
from .schemas import TRANSACTION_SCHEMA, SchemaRegistry
from .utils import from_quantity, to_data, to_quantity

# Python field name -> JSON-RPC field name
_FIELDS = {
    "to": "to",
    "from_address": "from",
    "data": "data",
    "value": "value",
    "gas": "gas",
    "gas_price": "gasPrice",
    "max_fee_per_gas": "maxFeePerGas",
    "max_priority_fee_per_gas": "maxPriorityFeePerGas",
    "nonce": "nonce",
    "chain_id": "chainId",
}
_QUANTITIES = {"value", "gas", "gasPrice", "maxFeePerGas", "maxPriorityFeePerGas", "nonce", "chainId"}


@dataclass(frozen=True)
class TransactionRequest:
    to: Optional[str] = None
    from_address: Optional[str] = None
    data: Optional[str] = None
    value: Optional[int] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    nonce: Optional[int] = None
    chain_id: Optional[int] = None
    contract_creation: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TransactionRequest":
        """
        Build a request from snake_case or JSON-RPC camelCase keys.

        Hex-string quantities are accepted and converted to int. Unknown keys
        are rejected.

        Raises:
            TransactionInvalid: On unknown keys or unparseable quantities
        """
        rpc_to_field = {rpc: name for name, rpc in _FIELDS.items()}
        kwargs: dict[str, Any] = {}
        for key, value in payload.items():
            if key in ("contract_creation", "contractCreation"):
                kwargs["contract_creation"] = bool(value)
                continue
            name = key if key in _FIELDS else rpc_to_field.get(key)
            if name is None:
                raise TransactionInvalid(f"Unknown transaction field: {key}")
            if _FIELDS[name] in _QUANTITIES and isinstance(value, str):
                try:
                    value = from_quantity(value)
                except ValueError:
                    raise TransactionInvalid(f"{key} is not a hex quantity: {value!r}")
            if name == "data" and isinstance(value, (bytes, bytearray)):
                value = to_data(value)
            kwargs[name] = value
        return cls(**kwargs)

    def _present(self) -> dict[str, Any]:
        fields = asdict(self)
        fields.pop("contract_creation")
        return {_FIELDS[name]: value for name, value in fields.items() if value is not None}

    def validate(self, registry: SchemaRegistry | None = None) -> None:
        """
        Check structural well-formedness.

        Raises:
            TransactionInvalid: Listing every problem found
        """
        if self.contract_creation:
            if self.to is not None:
                raise TransactionInvalid("Contract creation must not set 'to'")
            if not self.data or self.data == "0x":
                raise TransactionInvalid("Contract creation requires init code in 'data'")
        elif self.to is None:
            raise TransactionInvalid("Missing required field 'to' (set contract_creation for deployments)")

        # jsonschema treats 1.0 as an integer; the wire encoding does not
        not_ints = [
            f"{key}: {value!r} is not an int"
            for key, value in self._present().items()
            if key in _QUANTITIES and (isinstance(value, bool) or not isinstance(value, int))
        ]
        if not_ints:
            raise TransactionInvalid(f"Malformed transaction: {'; '.join(not_ints)}", errors=not_ints)

        registry = registry or SchemaRegistry.default()
        try:
            registry.validate_instance(self._present(), TRANSACTION_SCHEMA)
        except SchemaValidationError as exc:
            raise TransactionInvalid(
                f"Malformed transaction: {'; '.join(exc.errors)}",
                errors=exc.errors,
            ) from exc

    def with_chain_id(self, chain_id: int) -> "TransactionRequest":
        if self.chain_id is not None:
            return self
        return TransactionRequest(**{**asdict(self), "chain_id": chain_id})

    def to_rpc(self) -> dict[str, Any]:
        """Hex-encode quantities for ``eth_sendTransaction``."""
        tx: dict[str, Any] = {}
        for key, value in self._present().items():
            if key in _QUANTITIES:
                tx[key] = to_quantity(value)
            elif key == "data":
                tx[key] = to_data(value)
            else:
                tx[key] = value
        return tx
