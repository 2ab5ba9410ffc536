"""
Subscription channel for unsolicited wallet pushes.

Frame pushes ``chainChanged`` / ``accountsChanged`` (and ``eth_subscription``
envelopes) over a WebSocket connection. These never carry a request id and
are routed here instead of through the correlator.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger

from .messages import WalletNotification


class NotificationChannel:
    def __init__(self, maxsize: int = 64) -> None:
        self._maxsize = maxsize
        self._queues: list[asyncio.Queue[Optional[WalletNotification]]] = []

    @property
    def listeners(self) -> int:
        return len(self._queues)

    def publish(self, notification: WalletNotification) -> None:
        if not self._queues:
            logger.debug(f"No listener for wallet notification {notification.method}")
            return
        for queue in self._queues:
            if queue.full():
                dropped = queue.get_nowait()
                logger.warning(f"Notification queue full, dropped {dropped.method if dropped else None}")
            queue.put_nowait(notification)

    def open(self) -> asyncio.Queue[Optional[WalletNotification]]:
        queue: asyncio.Queue[Optional[WalletNotification]] = asyncio.Queue(maxsize=self._maxsize)
        self._queues.append(queue)
        return queue

    def release(self, queue: asyncio.Queue[Optional[WalletNotification]]) -> None:
        if queue in self._queues:
            self._queues.remove(queue)

    @asynccontextmanager
    async def listen(self) -> AsyncIterator[AsyncIterator[WalletNotification]]:
        """Yield an async iterator of notifications until the channel closes.

        Example::

            async with client.notifications.listen() as events:
                async for event in events:
                    ...
        """
        queue = self.open()

        async def _iterate() -> AsyncIterator[WalletNotification]:
            while True:
                item = await queue.get()
                if item is None:
                    return
                yield item

        try:
            yield _iterate()
        finally:
            self.release(queue)

    def close(self) -> None:
        """Wake every listener with an end-of-stream marker."""
        for queue in list(self._queues):
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(None)
        self._queues.clear()
