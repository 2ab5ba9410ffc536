"""
Frame wallet client.

Delegates account management and signing to a locally running Frame
wallet. The client never sees key material; it tracks a single piece of
session state, the chain id the wallet last confirmed.

Typical use::

    async with await FrameClient.connect(1) as client:
        await client.switch_network(42161)
        tx_hash = await client.send_transaction({"to": "0x...", "value": 10**15})

Chain mismatch on connect is governed by ``MismatchPolicy``:

- ``SWITCH`` (default): run the full switch protocol to the requested chain.
- ``FAIL``: raise ``ChainMismatch`` and close the client.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar, Union

from eth_abi.exceptions import DecodingError, EncodingError
from loguru import logger

from .abi import decode_function_result, encode_function_call
from .chains import ChainDescriptor, ChainRegistry, StaticChainRegistry
from .config import FrameConfig
from .errors import (
    CallError,
    ChainMismatch,
    ChainNotRegistered,
    ClientClosed,
    InitError,
    OperationError,
    ProtocolError,
    RpcError,
    SchemaValidationError,
    SendError,
    SwitchError,
    SwitchRejected,
    TransportError,
)
from .gate import OperationGate
from .rpc.correlator import RpcCorrelator
from .rpc.notifications import NotificationChannel
from .rpc.transport import Transport, open_transport
from .rpc.values import (
    expect_address_list,
    expect_chain_id,
    expect_data,
    expect_hash,
    expect_string,
)
from .tx import TransactionRequest
from .utils import is_address, to_data, to_quantity

E = TypeVar("E", bound=OperationError)
T = TypeVar("T")


class ClientState(str, Enum):
    UNINITIALIZED = "uninitialized"
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    CLOSED = "closed"


class MismatchPolicy(str, Enum):
    SWITCH = "switch"
    FAIL = "fail"


@dataclass(frozen=True)
class SwitchAck:
    chain_id: int
    changed: bool
    added_chain: bool = False


def _is_chain_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class FrameClient:
    def __init__(
        self,
        *,
        config: Optional[FrameConfig] = None,
        transport: Optional[Transport] = None,
        registry: Optional[ChainRegistry] = None,
    ) -> None:
        self.config = config or FrameConfig.from_env()
        self.registry: ChainRegistry = registry if registry is not None else StaticChainRegistry.default()
        self._notifications = NotificationChannel()
        self._transport = transport or open_transport(self.config)
        self._rpc = RpcCorrelator(
            self._transport,
            timeout=self.config.timeout,
            notifications=self._notifications,
        )
        self._active_chain_id: Optional[int] = None
        self._accounts: tuple[str, ...] = ()
        self._initialized = False
        self._closed = False
        self._switch_lock = asyncio.Lock()
        self._gate = OperationGate()

    # ============ Lifecycle ============

    @classmethod
    async def connect(
        cls,
        initial_chain_id: Optional[int] = None,
        *,
        config: Optional[FrameConfig] = None,
        transport: Optional[Transport] = None,
        registry: Optional[ChainRegistry] = None,
        on_mismatch: Union[MismatchPolicy, str] = MismatchPolicy.SWITCH,
    ) -> "FrameClient":
        """
        Create a client and initialize its session.

        Args:
            initial_chain_id: Chain the caller expects to work on (None: accept
                whatever the wallet reports)
            config: Endpoint, timeout and wallet error codes
            transport: Pre-built transport (default: chosen from config.endpoint)
            registry: Chain descriptors for the add-chain fallback
            on_mismatch: What to do when the wallet is on another chain

        Returns:
            An initialized FrameClient

        Raises:
            InitError: The client is closed before this propagates
        """
        client = cls(config=config, transport=transport, registry=registry)
        try:
            await client.initialize(initial_chain_id, on_mismatch=on_mismatch)
        except BaseException:
            await client.close()
            raise
        return client

    async def initialize(
        self,
        initial_chain_id: Optional[int] = None,
        *,
        on_mismatch: Union[MismatchPolicy, str] = MismatchPolicy.SWITCH,
    ) -> None:
        self._ensure_open(InitError)
        if self._initialized:
            raise InitError("state", "client is already initialized")
        policy = MismatchPolicy(on_mismatch)
        if initial_chain_id is not None and not _is_chain_id(initial_chain_id):
            raise InitError("validate", f"invalid chain id: {initial_chain_id!r}")

        result = await self._request(InitError, "accounts", self.config.methods.accounts)
        accounts = self._shape(InitError, "accounts", expect_address_list, result)
        result = await self._request(InitError, "chain_id", self.config.methods.chain_id)
        chain_id = self._shape(InitError, "chain_id", expect_chain_id, result)

        self._accounts = accounts
        self._active_chain_id = chain_id
        self._initialized = True
        logger.info(f"Frame session initialized on chain {chain_id} with {len(accounts)} account(s)")

        if initial_chain_id is None or initial_chain_id == chain_id:
            return
        if policy is MismatchPolicy.FAIL:
            raise ChainMismatch(expected=initial_chain_id, actual=chain_id)
        try:
            await self.switch_network(initial_chain_id)
        except SwitchError as exc:
            raise InitError("switch", str(exc), cause=exc) from exc

    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._rpc.cancel_all(ClientClosed("client closed while the call was in flight"))
        self._notifications.close()
        await self._transport.aclose()
        logger.info("Frame session closed")

    async def __aenter__(self) -> "FrameClient":
        if not self._initialized:
            try:
                await self.initialize()
            except BaseException:
                await self.close()
                raise
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ============ Session ============

    @property
    def active_chain_id(self) -> Optional[int]:
        return self._active_chain_id

    @property
    def accounts(self) -> tuple[str, ...]:
        """Accounts the wallet exposed at initialization."""
        return self._accounts

    @property
    def notifications(self) -> NotificationChannel:
        return self._notifications

    @property
    def state(self) -> ClientState:
        if self._closed:
            return ClientState.CLOSED
        if not self._initialized and not self._rpc.outstanding:
            return ClientState.UNINITIALIZED
        if self._rpc.outstanding:
            return ClientState.AWAITING_RESPONSE
        return ClientState.IDLE

    # ============ Queries ============

    async def get_chain_id(self) -> int:
        """Ask the wallet which chain it is on. Does not touch the session."""
        self._ensure_ready(CallError)
        async with self._gate.shared():
            result = await self._request(CallError, "chain_id", self.config.methods.chain_id)
        return self._shape(CallError, "chain_id", expect_chain_id, result)

    async def get_accounts(self) -> tuple[str, ...]:
        """Re-query the accounts the wallet currently exposes."""
        self._ensure_ready(CallError)
        async with self._gate.shared():
            result = await self._request(CallError, "accounts", self.config.methods.accounts)
        return self._shape(CallError, "accounts", expect_address_list, result)

    # ============ Switch ============

    async def switch_network(
        self,
        chain_id: int,
        descriptor: Optional[ChainDescriptor] = None,
    ) -> SwitchAck:
        """
        Switch the wallet to ``chain_id``.

        Sends ``wallet_switchEthereumChain``. If the wallet reports the chain
        as unrecognized, sends one ``wallet_addEthereumChain`` (descriptor
        from the argument, else the registry) and retries the switch once.
        Switching to the already-active chain issues no wallet call.

        Returns:
            SwitchAck describing what happened

        Raises:
            SwitchRejected: The wallet refused (``step`` names which request)
            ChainNotRegistered: Add-chain needed but no descriptor available
            SwitchError: Transport/protocol failure or invalid arguments
        """
        if not _is_chain_id(chain_id):
            raise SwitchError("validate", f"invalid chain id: {chain_id!r}")
        if descriptor is not None and descriptor.chain_id != chain_id:
            raise SwitchError(
                "validate",
                f"descriptor is for chain {descriptor.chain_id}, not {chain_id}",
            )
        self._ensure_ready(SwitchError)

        async with self._switch_lock:
            if chain_id == self._active_chain_id:
                logger.debug(f"Chain {chain_id} already active, skipping switch")
                return SwitchAck(chain_id=chain_id, changed=False)

            async with self._gate.exclusive():
                added = await self._run_switch(chain_id, descriptor)

            previous, self._active_chain_id = self._active_chain_id, chain_id
            logger.info(f"Switched chain {previous} -> {chain_id}")
            return SwitchAck(chain_id=chain_id, changed=True, added_chain=added)

    async def _run_switch(self, chain_id: int, descriptor: Optional[ChainDescriptor]) -> bool:
        params = [{"chainId": to_quantity(chain_id)}]
        try:
            await self._call(SwitchError, "switch", self.config.methods.switch_chain, params)
            return False
        except RpcError as exc:
            if not self.config.is_unrecognized_chain(exc):
                raise self._wallet_error(SwitchRejected, "switch", exc) from exc
            logger.info(f"Wallet does not recognize chain {chain_id}, adding it")

        await self._add_chain(chain_id, descriptor)

        try:
            await self._call(SwitchError, "retry_switch", self.config.methods.switch_chain, params)
        except RpcError as exc:
            raise self._wallet_error(SwitchRejected, "retry_switch", exc) from exc
        return True

    async def _add_chain(self, chain_id: int, descriptor: Optional[ChainDescriptor]) -> None:
        if descriptor is None:
            descriptor = self.registry.get(chain_id)
        if descriptor is None:
            raise ChainNotRegistered(chain_id)
        try:
            descriptor.validate()
        except SchemaValidationError as exc:
            raise SwitchError(
                "add_chain",
                f"malformed chain descriptor: {'; '.join(exc.errors)}",
                cause=exc,
            ) from exc
        except (ValueError, TypeError) as exc:
            raise SwitchError("add_chain", f"malformed chain descriptor: {exc}", cause=exc) from exc

        try:
            await self._call(SwitchError, "add_chain", self.config.methods.add_chain, [descriptor.to_rpc()])
        except RpcError as exc:
            raise self._wallet_error(SwitchRejected, "add_chain", exc) from exc
        logger.info(f"Added chain {chain_id} ({descriptor.chain_name}) to wallet")

    # ============ Transactions & calls ============

    async def send_transaction(self, tx: Union[TransactionRequest, Mapping[str, Any]]) -> str:
        """
        Forward a transaction to the wallet for signing and broadcast.

        ``chainId`` is pinned to the active chain unless the caller set one.

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            TransactionInvalid: Structural problem, nothing was sent
            SendError: Wallet rejection or transport/protocol failure
        """
        if not isinstance(tx, TransactionRequest):
            tx = TransactionRequest.from_dict(tx)
        tx.validate()
        self._ensure_ready(SendError)

        async with self._gate.shared():
            if self._active_chain_id is not None:
                tx = tx.with_chain_id(self._active_chain_id)
            result = await self._request(SendError, "send", self.config.methods.send_transaction, [tx.to_rpc()])
        tx_hash = self._shape(SendError, "send", expect_hash, result)
        logger.info(f"Wallet accepted transaction {tx_hash}")
        return tx_hash

    async def call_contract(
        self,
        address: str,
        calldata: Union[bytes, str],
        block: Union[str, int] = "latest",
    ) -> bytes:
        """
        Read-only contract call (``eth_call``). Never mutates the session.

        Returns:
            Raw return data
        """
        if not is_address(address):
            raise CallError("validate", f"invalid contract address: {address!r}")
        try:
            data = to_data(calldata)
            block_tag = to_quantity(block) if isinstance(block, int) else block
        except (ValueError, TypeError) as exc:
            raise CallError("validate", str(exc), cause=exc) from exc
        self._ensure_ready(CallError)

        async with self._gate.shared():
            result = await self._request(
                CallError,
                "call",
                self.config.methods.call,
                [{"to": address, "data": data}, block_tag],
            )
        return self._shape(CallError, "call", expect_data, result)

    async def read_contract(
        self,
        address: str,
        abi: Sequence[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
        block: Union[str, int] = "latest",
    ) -> Any:
        """
        ABI-encode a view call, run it, and decode the outputs.

        Returns:
            Decoded value (single output unwrapped), or None for empty return data
        """
        try:
            calldata = encode_function_call(abi, function_name, args)
        except (ValueError, TypeError, EncodingError) as exc:
            raise CallError("encode", str(exc), cause=exc) from exc

        raw = await self.call_contract(address, calldata, block)
        if not raw:
            return None
        try:
            return decode_function_result(abi, function_name, raw)
        except (ValueError, DecodingError) as exc:
            raise CallError("decode", str(exc), cause=exc) from exc

    async def subscribe(self, event: str) -> str:
        """
        Subscribe to a wallet event (e.g. "chainChanged", "accountsChanged").

        Pushes arrive on ``client.notifications``; they never change
        ``active_chain_id``, which only an acknowledged switch updates.

        Returns:
            Subscription id
        """
        self._ensure_ready(CallError)
        result = await self._request(CallError, "subscribe", self.config.methods.subscribe, [event])
        return self._shape(CallError, "subscribe", expect_string, result)

    # ============ Helpers ============

    def _ensure_open(self, error_cls: type[E]) -> None:
        if self._closed:
            closed = ClientClosed("client is closed")
            raise error_cls("state", str(closed), cause=closed) from closed

    def _ensure_ready(self, error_cls: type[E]) -> None:
        self._ensure_open(error_cls)
        if not self._initialized:
            raise error_cls("state", "client is not initialized")

    async def _call(self, error_cls: type[E], step: str, method: str, params: Sequence[Any] = ()) -> Any:
        """RPC call that wraps connection/frame failures but lets RpcError through."""
        self._ensure_open(error_cls)
        try:
            return await self._rpc.call(method, params)
        except (TransportError, ProtocolError) as exc:
            raise error_cls(step, str(exc), cause=exc) from exc

    async def _request(self, error_cls: type[E], step: str, method: str, params: Sequence[Any] = ()) -> Any:
        try:
            return await self._call(error_cls, step, method, params)
        except RpcError as exc:
            raise self._wallet_error(error_cls, step, exc) from exc

    def _wallet_error(self, error_cls: type[E], step: str, exc: RpcError) -> E:
        error = error_cls(step, f"wallet rejected request: {exc}", cause=exc)
        error.user_rejected = self.config.is_user_rejection(exc)
        return error

    @staticmethod
    def _shape(error_cls: type[E], step: str, accessor: Callable[[Any], T], value: Any) -> T:
        try:
            return accessor(value)
        except ProtocolError as exc:
            raise error_cls(step, str(exc), cause=exc) from exc
