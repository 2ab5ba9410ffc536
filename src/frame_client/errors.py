"""
Error taxonomy for the Frame client.

Three families sit under ``FrameClientError``:

- ``TransportError``: the connection to the wallet failed. Callers may retry
  after a backoff.
- ``ProtocolError``: a frame was malformed or did not match a request. This
  points at a wallet or transport bug and is never retried.
- ``RpcError``: the wallet answered with an error object. Code, message and
  data are kept verbatim.

Operation errors (``InitError``, ``SwitchError``, ``SendError``,
``CallError``) wrap one of the above and record the ``step`` that failed.
The wrapped error is available as ``cause`` and as ``__cause__``.
"""

from __future__ import annotations

from typing import Any, Optional


class FrameClientError(RuntimeError):
    exit_code: int = 1


# ============ Transport ============


class TransportError(FrameClientError):
    exit_code = 10


class ConnectionRefused(TransportError):
    """The wallet is not running or not listening on the endpoint."""


class ConnectionReset(TransportError):
    """The wallet closed the connection while a call was in flight."""


class RequestTimeout(TransportError):
    """No response arrived within the per-call window."""


class ClientClosed(TransportError):
    """The client has been closed and its connection released."""


# ============ Protocol ============


class ProtocolError(FrameClientError):
    exit_code = 11


class ResultShapeError(ProtocolError):
    """A result arrived but its JSON shape is not what the method returns."""


# ============ Wallet ============


class RpcError(FrameClientError):
    exit_code = 12

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data

    def codes(self) -> set[int]:
        """Return the top-level code plus any code nested in ``data``.

        Some wallets wrap the EIP-1193 code inside
        ``data.originalError.code`` and report a generic -32603 on top.
        """
        found = {self.code}
        data = self.data
        if isinstance(data, dict):
            original = data.get("originalError")
            if isinstance(original, dict) and isinstance(original.get("code"), int):
                found.add(original["code"])
            if isinstance(data.get("code"), int):
                found.add(data["code"])
        return found


# ============ Operations ============


class OperationError(FrameClientError):
    operation: str = "operation"
    user_rejected: bool = False

    def __init__(self, step: str, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{self.operation} failed at {step}: {message}")
        self.step = step
        self.cause = cause

    @property
    def rpc_error(self) -> Optional[RpcError]:
        return self.cause if isinstance(self.cause, RpcError) else None

    @property
    def retryable(self) -> bool:
        """True when the failure was connection-level and the client is still usable."""
        return isinstance(self.cause, TransportError) and not isinstance(self.cause, ClientClosed)


class InitError(OperationError):
    exit_code = 20
    operation = "initialize"


class ChainMismatch(InitError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            "chain_id",
            f"wallet is on chain {actual}, expected {expected}",
        )
        self.expected = expected
        self.actual = actual


class SwitchError(OperationError):
    exit_code = 21
    operation = "switch_network"


class SwitchRejected(SwitchError):
    """The wallet refused the switch or the add-chain request."""


class ChainNotRegistered(SwitchError):
    """The wallet does not know the chain and no descriptor is available."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(
            "add_chain",
            f"no chain descriptor available for chain {chain_id}",
        )
        self.chain_id = chain_id


class SendError(OperationError):
    exit_code = 22
    operation = "send_transaction"


class TransactionInvalid(SendError):
    """Structural validation failed before anything reached the wallet."""

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        super().__init__("validate", message)
        self.errors = errors or []


class CallError(OperationError):
    exit_code = 23
    operation = "call_contract"


# ============ Local ============


class ConfigError(ValueError):
    pass


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
