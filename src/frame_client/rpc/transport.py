"""
Transports to the wallet's local RPC endpoint.

Both transports connect lazily on the first send and release everything in
``aclose()``. They move bytes only: no retries, no JSON-RPC semantics.

- ``HttpTransport`` answers every send with the reply body.
- ``WebSocketTransport`` returns nothing from ``send``; inbound frames
  (responses and pushes alike) are fed to the bound receiver by a reader task.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Union

import httpx
import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from ..errors import (
    ConnectionRefused,
    ConnectionReset,
    ProtocolError,
    RequestTimeout,
    TransportError,
)


class FrameReceiver(Protocol):
    def feed(self, raw: Union[bytes, str]) -> None:
        ...

    def connection_lost(self, exc: Optional[BaseException]) -> None:
        ...


class Transport(Protocol):
    @property
    def is_open(self) -> bool:
        ...

    def bind(self, receiver: FrameReceiver) -> None:
        ...

    async def send(self, frame: bytes) -> Optional[bytes]:
        ...

    async def aclose(self) -> None:
        ...


class HttpTransport:
    """POST each frame to the wallet over loopback HTTP."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float,
        origin: str,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.origin = origin
        self._http_transport = http_transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def bind(self, receiver: FrameReceiver) -> None:
        # Replies come back from send(); nothing is pushed.
        pass

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json", "Origin": self.origin},
                transport=self._http_transport,
            )
            logger.debug(f"Opened HTTP connection to {self.url}")
        return self._client

    async def send(self, frame: bytes) -> Optional[bytes]:
        client = self._ensure_client()
        try:
            response = await client.post(self.url, content=frame)
        except httpx.ConnectError as exc:
            raise ConnectionRefused(f"Cannot reach wallet at {self.url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise RequestTimeout(f"Wallet at {self.url} did not answer in {self.timeout}s") from exc
        except (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError) as exc:
            raise ConnectionReset(f"Wallet closed the connection: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"HTTP transport failure: {exc}") from exc

        body = response.content
        if response.is_error and not body.lstrip().startswith((b"{", b"[")):
            raise TransportError(f"Wallet returned HTTP {response.status_code}: {response.text}")
        return body

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()
            logger.debug(f"Closed HTTP connection to {self.url}")


class WebSocketTransport:
    """Keep one WebSocket open to the wallet and demultiplex via a receiver."""

    def __init__(self, url: str, *, timeout: float, origin: str) -> None:
        self.url = url
        self.timeout = timeout
        self.origin = origin
        self._receiver: Optional[FrameReceiver] = None
        self._ws = None
        self._reader: Optional[asyncio.Task] = None
        self._connect_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    def bind(self, receiver: FrameReceiver) -> None:
        self._receiver = receiver

    async def _ensure_connected(self):
        async with self._connect_lock:
            if self._ws is not None:
                return self._ws
            try:
                self._ws = await asyncio.wait_for(
                    websockets.connect(self.url, origin=self.origin),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as exc:
                raise RequestTimeout(f"Timed out connecting to {self.url}") from exc
            except OSError as exc:
                raise ConnectionRefused(f"Cannot reach wallet at {self.url}: {exc}") from exc
            except (InvalidHandshake, InvalidURI) as exc:
                raise TransportError(f"WebSocket handshake with {self.url} failed: {exc}") from exc
            self._reader = asyncio.create_task(self._read_loop(self._ws))
            logger.debug(f"Opened WebSocket connection to {self.url}")
            return self._ws

    async def _read_loop(self, ws) -> None:
        error: Optional[BaseException] = None
        try:
            async for message in ws:
                if self._receiver is None:
                    continue
                try:
                    self._receiver.feed(message)
                except ProtocolError as exc:
                    logger.warning(f"Dropped undeliverable frame from wallet: {exc}")
        except ConnectionClosed as exc:
            error = exc
        finally:
            if self._ws is ws:
                self._ws = None
            if self._receiver is not None:
                self._receiver.connection_lost(error)

    async def send(self, frame: bytes) -> Optional[bytes]:
        ws = await self._ensure_connected()
        try:
            async with self._write_lock:
                await ws.send(frame.decode("utf-8"))
        except ConnectionClosed as exc:
            raise ConnectionReset(f"Wallet closed the connection: {exc}") from exc
        return None

    async def aclose(self) -> None:
        ws, self._ws = self._ws, None
        reader, self._reader = self._reader, None
        if ws is not None:
            await ws.close()
            logger.debug(f"Closed WebSocket connection to {self.url}")
        if reader is not None and not reader.done():
            reader.cancel()
            try:
                await reader
            except asyncio.CancelledError:
                pass


def open_transport(config) -> Transport:
    """Pick a transport for ``config.endpoint`` by URL scheme."""
    scheme = config.endpoint.split(":", 1)[0].lower()
    if scheme in ("http", "https"):
        return HttpTransport(config.endpoint, timeout=config.timeout, origin=config.origin)
    if scheme in ("ws", "wss"):
        return WebSocketTransport(config.endpoint, timeout=config.timeout, origin=config.origin)
    raise ValueError(f"Unsupported wallet endpoint scheme: {config.endpoint}")
