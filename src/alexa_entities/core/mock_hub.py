"""Mock Home Assistant WebSocket hub for development and testing."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from alexa_entities.core.wire import MessageType

logger = logging.getLogger(__name__)

MOCK_DEVICES: list[dict[str, Any]] = [
    {
        "id": "device-1",
        "name": "Philips Hue Bridge",
        "model": "BSB002",
        "manufacturer": "Philips",
        "area_id": "area-living-room",
    },
    {
        "id": "device-2",
        "name": "Smart Thermostat",
        "model": "T3000",
        "manufacturer": "Ecobee",
        "area_id": "area-hallway",
    },
    {
        "id": "device-3",
        "name": "Smart Plug",
        "model": "HS110",
        "manufacturer": "TP-Link",
        "area_id": "area-kitchen",
    },
]

MOCK_ENTITIES: list[dict[str, Any]] = [
    {
        "id": "entity-1",
        "entity_id": "light.living_room_ceiling",
        "entity_category": None,
        "name": "Living Room Ceiling Light",
        "area_id": "area-living-room",
        "device_id": "device-1",
    },
    {
        "id": "entity-2",
        "entity_id": "climate.thermostat",
        "entity_category": None,
        "name": "Main Thermostat",
        "area_id": "area-hallway",
        "device_id": "device-2",
    },
    {
        "id": "entity-3",
        "entity_id": "switch.coffee_maker",
        "entity_category": None,
        "name": "Coffee Maker",
        "area_id": "area-kitchen",
        "device_id": "device-3",
    },
    {
        "id": "entity-4",
        "entity_id": "automation.morning_routine",
        "entity_category": None,
        "name": "Morning Routine",
        "area_id": None,
        "device_id": None,
    },
    {
        "id": "entity-5",
        "entity_id": "update.hue_firmware",
        "entity_category": "config",
        "name": "Hue Firmware",
        "area_id": None,
        "device_id": "device-1",
    },
]

MOCK_AREAS: list[dict[str, Any]] = [
    {"area_id": "area-living-room", "name": "Living Room", "floor_id": "ground"},
    {"area_id": "area-hallway", "name": "Hallway", "floor_id": "ground"},
    {"area_id": "area-kitchen", "name": "Kitchen", "floor_id": "ground"},
]


@dataclass
class MockHub:
    """Answers the auth handshake and the three registry queries."""

    host: str = "127.0.0.1"
    port: int = 8765
    access_token: str = "test-token"
    ha_version: str = "2025.1.0"
    devices: list[dict[str, Any]] = field(default_factory=lambda: list(MOCK_DEVICES))
    entities: list[dict[str, Any]] = field(default_factory=lambda: list(MOCK_ENTITIES))
    areas: list[dict[str, Any]] = field(default_factory=lambda: list(MOCK_AREAS))

    received: list[dict[str, Any]] = field(default_factory=list, repr=False)
    _server: Server | None = field(default=None, repr=False)

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.bound_port}/api/websocket"

    @property
    def bound_port(self) -> int:
        if self._server is None:
            return self.port
        return next(iter(self._server.sockets)).getsockname()[1]

    async def start(self) -> None:
        self._server = await serve(self._handle_client, self.host, self.port)
        logger.info("Mock hub listening on %s", self.url)

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            logger.info("Mock hub stopped")

    async def run_forever(self) -> None:
        await self.start()
        if self._server:
            await self._server.serve_forever()

    async def _handle_client(self, connection: ServerConnection) -> None:
        logger.info("Client connected: %s", connection.remote_address)
        try:
            await self._send(
                connection,
                {"type": MessageType.AUTH_REQUIRED, "ha_version": self.ha_version},
            )
            async for raw in connection:
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning("Ignoring malformed frame: %r", raw)
                    continue
                self.received.append(message)
                await self._handle_message(connection, message)
        except ConnectionClosed:
            logger.debug("Client disconnected: %s", connection.remote_address)

    async def _handle_message(
        self, connection: ServerConnection, message: dict[str, Any]
    ) -> None:
        msg_type = message.get("type")
        logger.debug("Received %s", msg_type)

        if msg_type == MessageType.AUTH:
            if message.get("access_token") == self.access_token:
                await self._send(
                    connection,
                    {"type": MessageType.AUTH_OK, "ha_version": self.ha_version},
                )
            else:
                await self._send(
                    connection,
                    {"type": MessageType.AUTH_INVALID, "message": "Invalid access token"},
                )
                await connection.close()

        elif msg_type == MessageType.GET_DEVICES:
            await self._send_result(connection, message, self.devices)

        elif msg_type == MessageType.GET_ENTITIES:
            await self._send_result(connection, message, self.entities)

        elif msg_type == MessageType.GET_AREAS:
            await self._send_result(connection, message, self.areas)

        else:
            logger.debug("Unknown message type: %s", msg_type)

    async def _send_result(
        self,
        connection: ServerConnection,
        request: dict[str, Any],
        result: list[dict[str, Any]],
    ) -> None:
        await self._send(
            connection,
            {
                "type": MessageType.RESULT,
                "id": request.get("id"),
                "success": True,
                "result": result,
            },
        )

    async def _send(self, connection: ServerConnection, message: dict[str, Any]) -> None:
        await connection.send(json.dumps(message))


async def run_mock_hub(
    host: str = "127.0.0.1", port: int = 8765, access_token: str = "test-token"
) -> None:
    hub = MockHub(host=host, port=port, access_token=access_token)
    await hub.run_forever()
