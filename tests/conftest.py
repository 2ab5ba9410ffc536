"""Shared fakes for the Frame client tests.

``FakeWallet`` stands in for the HTTP transport: each send is answered
synchronously from a per-method script (falling back to sensible defaults),
and every request is recorded so tests can assert call order.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional

import pytest
from loguru import logger

from frame_client.config import FrameConfig

ACCOUNT = "0x" + "12" * 20
CONTRACT = "0x" + "ab" * 20
TX_HASH = "0x" + "cd" * 32

CONFIG = FrameConfig(endpoint="http://127.0.0.1:1248", timeout=1.0)


@dataclass(frozen=True)
class Fault:
    """Scripted wallet error object."""

    code: int
    message: str = "wallet error"
    data: Any = None


@dataclass(frozen=True)
class RawReply:
    """Scripted raw reply body; ``{id}`` is replaced by the request id."""

    body: str


class FakeWallet:
    def __init__(self, chain_id: int = 1, accounts: tuple[str, ...] = (ACCOUNT,)) -> None:
        self.chain_id = chain_id
        self.accounts = list(accounts)
        self.calls: list[tuple[str, list]] = []
        self.scripts: dict[str, list] = {}
        self.delay = 0.0
        self.closed = False
        self.receiver = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def script(self, method: str, *outcomes: Any) -> None:
        self.scripts.setdefault(method, []).extend(outcomes)

    def bind(self, receiver) -> None:
        self.receiver = receiver

    async def send(self, frame: bytes) -> Optional[bytes]:
        self._open = True
        request = json.loads(frame)
        self.calls.append((request["method"], request["params"]))
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self._outcome(request["method"], request["params"])
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, RawReply):
            return outcome.body.replace("{id}", json.dumps(request["id"])).encode("utf-8")
        if isinstance(outcome, Fault):
            error: dict[str, Any] = {"code": outcome.code, "message": outcome.message}
            if outcome.data is not None:
                error["data"] = outcome.data
            body = {"jsonrpc": "2.0", "id": request["id"], "error": error}
        else:
            body = {"jsonrpc": "2.0", "id": request["id"], "result": outcome}
        return json.dumps(body).encode("utf-8")

    def _outcome(self, method: str, params: list) -> Any:
        queue = self.scripts.get(method)
        if queue:
            return queue.pop(0)
        if method == "eth_accounts":
            return self.accounts
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "wallet_switchEthereumChain":
            self.chain_id = int(params[0]["chainId"], 16)
            return None
        if method == "wallet_addEthereumChain":
            return None
        if method == "eth_sendTransaction":
            return TX_HASH
        if method == "eth_call":
            return "0x" + "00" * 31 + "2a"
        if method == "eth_subscribe":
            return "0x9ce59a13059e417087c02d3236a0b1cc"
        return Fault(-32601, f"method {method} not supported")

    async def aclose(self) -> None:
        self.closed = True
        self._open = False


@pytest.fixture()
def wallet() -> FakeWallet:
    return FakeWallet(chain_id=1)


@pytest.fixture()
def log_messages():
    """Capture frame_client log messages (loguru)."""
    messages: list[str] = []
    logger.enable("frame_client")
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
    logger.disable("frame_client")
