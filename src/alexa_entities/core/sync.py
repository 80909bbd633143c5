"""Registry sync engine.

Keeps one WebSocket connection to Home Assistant, authenticates, fetches the
device, entity and area registries and joins them into a list of
:class:`CompiledEntity`. Readers get immutable :class:`Snapshot` objects,
either from :attr:`RegistrySyncEngine.snapshot` or through :meth:`subscribe`.

Only the task running :meth:`RegistrySyncEngine.run` touches the registry
maps, one frame at a time, so they need no locking.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Collection, Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from alexa_entities.config.options import Credentials
from alexa_entities.core import wire
from alexa_entities.core.transport import Connector, Transport
from alexa_entities.errors import (
    AlexaEntitiesError,
    AuthenticationFailed,
    CredentialUnavailable,
    DecodeError,
    TransportError,
)
from alexa_entities.models import (
    Area,
    CompiledArea,
    CompiledDevice,
    CompiledEntity,
    Device,
    Entity,
)

logger = logging.getLogger(__name__)

WARNING_CREDENTIALS = "credentials"
WARNING_TRANSPORT = "transport"
WARNING_AUTH = "auth"

_Record = TypeVar("_Record", bound=BaseModel)


class EngineState(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    AWAITING_AUTH = "awaiting_auth"
    AUTHENTICATED = "authenticated"
    SYNCED = "synced"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class CredentialSource(Protocol):
    def get_credentials(self) -> Credentials: ...


@dataclass(frozen=True)
class Snapshot:
    """What readers see of the engine at one point in time."""

    state: EngineState = EngineState.IDLE
    entities: tuple[CompiledEntity, ...] = ()
    connected: bool = False
    error: str | None = None
    warnings: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    joins: int = 0

    @property
    def synced(self) -> bool:
        return self.joins > 0


def compile_entities(
    devices: Mapping[str, Device],
    entities: Mapping[str, Entity],
    areas: Mapping[str, Area],
    allowlist: Collection[str] = frozenset(),
) -> tuple[CompiledEntity, ...]:
    compiled = []
    for entity in entities.values():
        device = devices.get(entity.device_id) if entity.device_id else None
        area = areas.get(entity.area_id) if entity.area_id else None
        compiled.append(
            CompiledEntity(
                id=entity.id,
                entity_id=entity.entity_id,
                name=entity.display_name,
                entity_category=entity.entity_category or "",
                shared=entity.entity_id in allowlist,
                device=CompiledDevice(
                    id=device.id if device else "",
                    name=device.display_name if device else "",
                    manufacturer=(device.manufacturer or "") if device else "",
                    model=(device.model or "") if device else "",
                ),
                area=CompiledArea(
                    area_id=area.area_id if area else "",
                    name=area.name if area else "",
                ),
            )
        )
    return tuple(compiled)


def _index(
    records: Iterable[Any], model: type[_Record], key: Callable[[_Record], str]
) -> dict[str, _Record]:
    indexed: dict[str, _Record] = {}
    for record in records:
        try:
            item = model.model_validate(record)
        except PydanticValidationError as exc:
            logger.debug("Skipping malformed %s record: %s", model.__name__, exc)
            continue
        indexed[key(item)] = item
    return indexed


class RegistrySyncEngine:
    """Mirror of Home Assistant's registries over one WebSocket connection.

    Call :meth:`run` as a task; it returns when the connection ends. Calling it
    again reconnects while keeping the last compiled list visible. A
    :meth:`close` issued before or during a run stops that run at its next
    step; nothing further is attempted on the connection.
    """

    def __init__(
        self,
        credentials: CredentialSource,
        connector: Connector,
        *,
        entity_domains: Collection[str],
        allowlist: Iterable[str] = (),
    ) -> None:
        self._credentials = credentials
        self._connector = connector
        self._entity_domains = frozenset(entity_domains)
        self._allowlist = frozenset(allowlist)

        self._devices: dict[str, Device] = {}
        self._entities: dict[str, Entity] = {}
        self._areas: dict[str, Area] = {}

        self._snapshot = Snapshot()
        self._subscribers: list[Callable[[Snapshot], None]] = []
        self._settled = asyncio.Event()
        self._failure: AlexaEntitiesError | None = None

        self._transport: Transport | None = None
        self._access_token = ""
        self._cycle = 0
        self._closing = False
        self._stop = False
        self._running = False

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def devices(self) -> Mapping[str, Device]:
        return MappingProxyType(self._devices)

    @property
    def entities(self) -> Mapping[str, Entity]:
        return MappingProxyType(self._entities)

    @property
    def areas(self) -> Mapping[str, Area]:
        return MappingProxyType(self._areas)

    def subscribe(self, callback: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Call ``callback`` with every new snapshot; returns an unsubscribe."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._subscribers.remove(callback)

        return _unsubscribe

    def _publish(self, snapshot: Snapshot) -> None:
        if snapshot.state != self._snapshot.state:
            logger.debug("Engine state %s -> %s", self._snapshot.state, snapshot.state)
        self._snapshot = snapshot
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot subscriber %r failed", callback)

    def _update(self, **changes: Any) -> None:
        self._publish(replace(self._snapshot, **changes))

    def _fail(self, warning_id: str, error: AlexaEntitiesError) -> None:
        message = str(error)
        logger.error("%s", message)
        self._failure = error
        warnings = {**self._snapshot.warnings, warning_id: message}
        state = EngineState.SYNCED if self._snapshot.synced else EngineState.ERROR
        self._update(
            state=state,
            connected=False,
            error=message,
            warnings=MappingProxyType(warnings),
        )
        self._settled.set()

    async def run(self) -> None:
        if self._running:
            raise RuntimeError("engine is already running")
        self._running = True
        self._stop = False
        self._cycle = 0
        try:
            await self._run()
        finally:
            self._running = False
            self._closing = False

    async def _run(self) -> None:
        if self._closing:
            return

        try:
            credentials = await asyncio.to_thread(self._credentials.get_credentials)
        except CredentialUnavailable as exc:
            if not self._closing:
                self._fail(WARNING_CREDENTIALS, exc)
            return

        if self._closing:
            return

        self._access_token = credentials.access_token
        self._update(state=EngineState.CONNECTING)
        logger.info("Connecting to Home Assistant at %s", credentials.websocket_url)
        try:
            transport = await self._connector(credentials.websocket_url)
        except TransportError as exc:
            if not self._closing:
                self._fail(WARNING_TRANSPORT, exc)
            return

        if self._closing:
            await transport.close()
            self._update(state=EngineState.DISCONNECTED, connected=False)
            return

        self._transport = transport
        self._update(state=EngineState.AWAITING_AUTH, connected=True, error=None)
        try:
            while not self._stop:
                frame = await transport.recv()
                await self._handle_frame(frame)
        except TransportError as exc:
            if not self._closing:
                self._fail(WARNING_TRANSPORT, exc)
        finally:
            self._transport = None
            await transport.close()

        if self._snapshot.connected:
            self._update(connected=False)

    async def close(self) -> None:
        """Drop the connection; the compiled list stays as it is."""
        self._closing = True
        transport, self._transport = self._transport, None
        if transport is not None:
            await transport.close()
        if self._snapshot.state != EngineState.ERROR:
            self._update(state=EngineState.DISCONNECTED, connected=False)
        self._settled.set()

    async def reload(self) -> bool:
        """Re-send the registry queries on the live, authenticated connection."""
        if self._transport is None or self._snapshot.state not in (
            EngineState.AUTHENTICATED,
            EngineState.SYNCED,
        ):
            logger.debug("Reload skipped: no live connection")
            return False

        logger.info("Reloading devices, entities and areas")
        try:
            await self._send_queries()
        except TransportError as exc:
            logger.warning("Reload failed: %s", exc)
            return False
        return True

    def set_allowlist(self, entity_ids: Iterable[str]) -> None:
        """Replace the published allowlist and refresh ``shared`` flags."""
        self._allowlist = frozenset(entity_ids)
        self._join()

    async def wait_for_snapshot(
        self, timeout: float | None = None
    ) -> tuple[CompiledEntity, ...]:
        """Wait for the first completed join; raise the failure if none comes."""
        try:
            async with asyncio.timeout(timeout):
                await self._settled.wait()
        except TimeoutError as exc:
            raise TransportError(
                f"Timed out after {timeout}s waiting for Home Assistant registries"
            ) from exc

        if self._snapshot.synced:
            return self._snapshot.entities
        if self._failure is not None:
            raise self._failure
        raise TransportError("Connection to Home Assistant closed before sync")

    async def _send(self, message: wire.HubMessage) -> None:
        if self._transport is None or self._closing:
            raise TransportError("Not connected to Home Assistant")
        await self._transport.send(wire.encode(message))

    async def _send_queries(self) -> None:
        cycle = self._cycle
        self._cycle += 1
        for request in wire.REGISTRY_QUERIES:
            await self._send(wire.registry_query(request, cycle))

    async def _handle_frame(self, frame: wire.RawFrame) -> None:
        try:
            message = wire.decode(frame)
        except DecodeError as exc:
            logger.warning("Dropping frame: %s", exc)
            return

        if wire.is_auth_required(message):
            if self._snapshot.state != EngineState.AWAITING_AUTH:
                logger.debug("Ignoring auth_required in state %s", self._snapshot.state)
                return
            await self._send(wire.auth_message(self._access_token))
        elif wire.is_auth_ok(message):
            logger.info("Authenticated with Home Assistant %s", message.ha_version or "")
            self._update(
                state=EngineState.AUTHENTICATED,
                error=None,
                warnings=MappingProxyType({}),
            )
            await self._send_queries()
        elif wire.is_auth_invalid(message):
            reason = message.message or "invalid access token"
            self._fail(WARNING_AUTH, AuthenticationFailed(f"Authentication failed: {reason}"))
            self._stop = True
        elif message.type == wire.MessageType.RESULT:
            self._handle_result(message)
        else:
            logger.debug("Ignoring %s message", message.type)

    def _handle_result(self, message: wire.HubMessage) -> None:
        if message.success is False:
            logger.warning(
                "Request %s failed, keeping previous registry: %s",
                message.id,
                (message.error or {}).get("message", "unknown error"),
            )
            return

        if wire.is_device_result(message):
            self._devices = _index(message.records, Device, lambda d: d.id)
            logger.debug("Received %d devices", len(self._devices))
        elif wire.is_entity_result(message):
            valid = (
                record
                for record in message.records
                if wire.is_valid_entity(record, self._entity_domains)
            )
            self._entities = _index(valid, Entity, lambda e: e.id)
            logger.debug("Received %d entities", len(self._entities))
        elif wire.is_area_result(message):
            self._areas = _index(message.records, Area, lambda a: a.area_id)
            logger.debug("Received %d areas", len(self._areas))
        else:
            logger.debug("Ignoring result for request %s", message.id)
            return

        self._join()

    def _join(self) -> None:
        if not (self._devices and self._entities and self._areas):
            return

        compiled = compile_entities(
            self._devices, self._entities, self._areas, self._allowlist
        )
        state = self._snapshot.state
        if state in (EngineState.AUTHENTICATED, EngineState.SYNCED):
            state = EngineState.SYNCED
        self._update(state=state, entities=compiled, joins=self._snapshot.joins + 1)
        self._settled.set()


async def fetch_compiled_entities(
    credentials: CredentialSource,
    connector: Connector,
    *,
    entity_domains: Collection[str],
    allowlist: Iterable[str] = (),
    timeout: float | None = None,
) -> list[CompiledEntity]:
    """Connect, wait for the first full join, disconnect and return it."""
    engine = RegistrySyncEngine(
        credentials, connector, entity_domains=entity_domains, allowlist=allowlist
    )
    runner = asyncio.create_task(engine.run())
    try:
        entities = await engine.wait_for_snapshot(timeout)
    finally:
        await engine.close()
        runner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await runner
    return list(entities)
