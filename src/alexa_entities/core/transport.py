from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from alexa_entities.core.wire import RawFrame
from alexa_entities.errors import TransportClosed, TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Duplex frame channel to the hub."""

    async def send(self, data: bytes) -> None: ...

    async def recv(self) -> RawFrame: ...

    async def close(self) -> None: ...


Connector = Callable[[str], Awaitable[Transport]]


class WebSocketTransport:
    """:class:`Transport` over a ``websockets`` client connection."""

    def __init__(self, connection: ClientConnection) -> None:
        self._connection = connection

    async def send(self, data: bytes) -> None:
        try:
            # the hub only accepts text frames
            await self._connection.send(data.decode("utf-8"))
        except ConnectionClosed as exc:
            raise TransportClosed(f"Connection to Home Assistant closed: {exc}") from exc
        except (OSError, WebSocketException) as exc:
            raise TransportError(f"Failed to send to Home Assistant: {exc}") from exc

    async def recv(self) -> RawFrame:
        try:
            return await self._connection.recv()
        except ConnectionClosed as exc:
            raise TransportClosed(f"Connection to Home Assistant closed: {exc}") from exc
        except (OSError, WebSocketException) as exc:
            raise TransportError(f"Failed to receive from Home Assistant: {exc}") from exc

    async def close(self) -> None:
        await self._connection.close()


def websocket_connector(timeout: float, max_size: int | None = None) -> Connector:
    async def _connect(url: str) -> Transport:
        logger.debug("Connecting to %s (timeout=%.1fs)", url, timeout)
        try:
            connection = await connect(
                url, open_timeout=timeout, close_timeout=5, max_size=max_size
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise TransportError(
                "WebSocket connection error. Unable to connect to Home Assistant: "
                f"{exc}"
            ) from exc
        return WebSocketTransport(connection)

    return _connect
