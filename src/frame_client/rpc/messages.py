from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..errors import ProtocolError, RpcError
from ..schemas import RESPONSE_SCHEMA, SchemaRegistry

RequestId = Union[int, str]


@dataclass(frozen=True)
class RpcRequest:
    id: RequestId
    method: str
    params: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }

    def encode(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class RpcErrorObject:
    code: int
    message: str
    data: Any = None

    def to_exception(self) -> RpcError:
        return RpcError(self.code, self.message, self.data)


@dataclass(frozen=True)
class RpcResponse:
    id: Optional[RequestId]
    result: Any = None
    error: Optional[RpcErrorObject] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any], registry: SchemaRegistry | None = None) -> "RpcResponse":
        """Build a response from a decoded frame, rejecting malformed ones.

        Raises:
            ProtocolError: unless the frame has an id and exactly one of
                result/error
        """
        registry = registry or SchemaRegistry.default()
        errors = registry.errors_for(payload, RESPONSE_SCHEMA)
        if errors:
            raise ProtocolError(f"Malformed response frame: {'; '.join(errors)}")
        if "error" in payload:
            err = payload["error"]
            return cls(
                id=payload["id"],
                error=RpcErrorObject(err["code"], err["message"], err.get("data")),
            )
        return cls(id=payload["id"], result=payload["result"])

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error.to_exception()
        return self.result


@dataclass(frozen=True)
class WalletNotification:
    """An unsolicited message pushed by the wallet (no id)."""

    method: str
    params: Any = None

    @property
    def subscription(self) -> Optional[str]:
        if isinstance(self.params, dict):
            sub = self.params.get("subscription")
            return sub if isinstance(sub, str) else None
        return None

    @property
    def result(self) -> Any:
        if isinstance(self.params, dict) and "result" in self.params:
            return self.params["result"]
        return self.params


def decode_frame(raw: Union[bytes, str]) -> Any:
    """Decode raw bytes/text into JSON, failing with ProtocolError."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(f"Frame is not valid JSON: {exc}") from exc


def is_notification(payload: Any) -> bool:
    return isinstance(payload, dict) and "method" in payload and payload.get("id") is None
