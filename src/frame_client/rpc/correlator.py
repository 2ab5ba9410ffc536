"""
Request/response correlation over a single wallet connection.

Each call gets a fresh integer id and a future in the outstanding table.
Inbound frames resolve at most one future each; frames for ids that are not
outstanding are logged and dropped without touching any live call.
"""

from __future__ import annotations

import asyncio
import itertools
from collections import deque
from typing import Any, Iterable, Optional, Union

from loguru import logger

from ..errors import ConnectionReset, ProtocolError, RequestTimeout
from ..schemas import SchemaRegistry
from .messages import (
    RequestId,
    RpcRequest,
    RpcResponse,
    WalletNotification,
    decode_frame,
    is_notification,
)
from .notifications import NotificationChannel
from .transport import Transport

# How many resolved ids to remember for duplicate detection
_RECENT_IDS = 256


class RpcCorrelator:
    def __init__(
        self,
        transport: Transport,
        *,
        timeout: float,
        notifications: Optional[NotificationChannel] = None,
        registry: Optional[SchemaRegistry] = None,
    ) -> None:
        self.transport = transport
        self.timeout = timeout
        self.notifications = notifications
        self._registry = registry or SchemaRegistry.default()
        self._ids = itertools.count(1)
        self._pending: dict[RequestId, asyncio.Future] = {}
        self._resolved: deque[RequestId] = deque(maxlen=_RECENT_IDS)
        transport.bind(self)

    @property
    def outstanding(self) -> int:
        return len(self._pending)

    async def call(self, method: str, params: Iterable[Any] = ()) -> Any:
        """
        Send one request and wait for its response.

        Args:
            method: RPC method name (e.g., "eth_chainId")
            params: RPC parameters

        Returns:
            Result field of the matching response

        Raises:
            RpcError: If the wallet answered with an error object
            ProtocolError: If the reply was malformed or unmatched
            TransportError: If the connection failed or timed out
        """
        request = RpcRequest(id=next(self._ids), method=method, params=list(params))
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request.id] = future
        logger.debug(f"-> #{request.id} {method}")
        try:
            response = await asyncio.wait_for(self._exchange(request, future), self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"#{request.id} {method} timed out after {self.timeout}s, discarding id")
            raise RequestTimeout(f"{method} got no response within {self.timeout}s") from None
        finally:
            self._pending.pop(request.id, None)
            if future.done() and not future.cancelled():
                # Marks an exception set by cancel_all as retrieved when send() failed first
                future.exception()
        # Only answered ids count as duplicates later; timed-out ids stay orphans
        self._resolved.append(request.id)
        logger.debug(f"<- #{request.id} {'ok' if response.ok else f'error {response.error.code}'}")
        return response.unwrap()

    async def _exchange(self, request: RpcRequest, future: asyncio.Future) -> RpcResponse:
        reply = await self.transport.send(request.encode())
        if reply is not None:
            self.feed(reply)
            if not future.done():
                raise ProtocolError(f"Reply did not answer request #{request.id} ({request.method})")
        return await future

    # ============ Receiver ============

    def feed(self, raw: Union[bytes, str]) -> None:
        """Route one inbound frame (or batch) to its call or to the notification channel.

        Raises:
            ProtocolError: If the frame is not JSON or is malformed without an
                outstanding id to blame
        """
        payload = decode_frame(raw)
        if isinstance(payload, list):
            if not payload:
                raise ProtocolError("Empty batch frame")
            for item in payload:
                self._dispatch(item)
        else:
            self._dispatch(payload)

    def _dispatch(self, payload: Any) -> None:
        if is_notification(payload):
            notification = WalletNotification(method=payload["method"], params=payload.get("params"))
            if self.notifications is not None:
                self.notifications.publish(notification)
            else:
                logger.debug(f"Ignored wallet notification {notification.method}")
            return

        try:
            response = RpcResponse.from_dict(payload, registry=self._registry)
        except ProtocolError as exc:
            frame_id = payload.get("id") if isinstance(payload, dict) else None
            future = self._pending.get(frame_id) if _hashable(frame_id) else None
            if future is None or future.done():
                logger.warning(f"Malformed frame from wallet: {exc}")
                raise
            future.set_exception(exc)
            return

        future = self._pending.get(response.id) if _hashable(response.id) else None
        if future is None:
            if response.id in self._resolved:
                logger.debug(f"Discarded duplicate response for #{response.id}")
            else:
                logger.warning(f"Discarded orphan response for unknown id {response.id!r}")
            return
        if future.done():
            logger.debug(f"Discarded duplicate response for #{response.id}")
            return
        future.set_result(response)

    def connection_lost(self, exc: Optional[BaseException]) -> None:
        if self._pending:
            self.cancel_all(ConnectionReset(f"Wallet connection lost: {exc or 'closed'}"))

    def cancel_all(self, exc: BaseException) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(exc)


def _hashable(value: Any) -> bool:
    return isinstance(value, (int, str))
