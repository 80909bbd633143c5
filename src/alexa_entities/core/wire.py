"""Home Assistant WebSocket message codec.

Frames are JSON objects carrying a ``type`` and, for request-scoped frames,
an integer ``id``. Registry queries use a stable id per registry so a reply
can be classified without tracking outstanding requests. The hub requires ids
to increase over the lifetime of a connection, so repeated query cycles add a
multiple of ``ID_STRIDE`` to the base id and classification uses the residue.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Collection, Iterable
from enum import IntEnum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from alexa_entities.errors import DecodeError

logger = logging.getLogger(__name__)

ID_STRIDE = 10


class MessageType(StrEnum):
    AUTH_REQUIRED = "auth_required"
    AUTH_OK = "auth_ok"
    AUTH_INVALID = "auth_invalid"
    AUTH = "auth"
    RESULT = "result"
    GET_DEVICES = "config/device_registry/list"
    GET_ENTITIES = "config/entity_registry/list"
    GET_AREAS = "config/area_registry/list"


class RequestId(IntEnum):
    GET_DEVICES = 2
    GET_ENTITIES = 3
    GET_AREAS = 4


REGISTRY_QUERIES: dict[RequestId, MessageType] = {
    RequestId.GET_DEVICES: MessageType.GET_DEVICES,
    RequestId.GET_ENTITIES: MessageType.GET_ENTITIES,
    RequestId.GET_AREAS: MessageType.GET_AREAS,
}


class HubMessage(BaseModel):
    """One frame exchanged with the hub."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    id: int | None = None
    success: bool | None = None
    result: Any = None
    access_token: str | None = None
    message: str | None = None
    error: dict[str, Any] | None = None
    ha_version: str | None = None

    @property
    def records(self) -> list[Any]:
        """Result payload as a list; anything else counts as no records."""
        if isinstance(self.result, list):
            return self.result
        return []


RawFrame = str | bytes | bytearray | memoryview | Iterable[bytes]


def _normalize(data: RawFrame) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    try:
        return b"".join(bytes(chunk) for chunk in data)
    except TypeError as exc:
        raise DecodeError(f"Unsupported frame payload: {type(data).__name__}") from exc


def encode(message: HubMessage) -> bytes:
    payload = message.model_dump(exclude_none=True)
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def decode(data: RawFrame) -> HubMessage:
    raw = _normalize(data)
    try:
        return HubMessage.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise DecodeError(f"Malformed hub frame: {exc.errors()[0]['msg']}") from exc


def auth_message(access_token: str) -> HubMessage:
    return HubMessage(type=MessageType.AUTH, access_token=access_token)


def registry_query(request: RequestId, cycle: int = 0) -> HubMessage:
    return HubMessage(type=REGISTRY_QUERIES[request], id=cycle * ID_STRIDE + request)


def request_kind(request_id: int | None) -> RequestId | None:
    if request_id is None or request_id < 0:
        return None
    try:
        return RequestId(request_id % ID_STRIDE)
    except ValueError:
        return None


def is_auth_required(message: HubMessage) -> bool:
    return message.type == MessageType.AUTH_REQUIRED


def is_auth_ok(message: HubMessage) -> bool:
    return message.type == MessageType.AUTH_OK


def is_auth_invalid(message: HubMessage) -> bool:
    return message.type == MessageType.AUTH_INVALID


def _is_result_for(message: HubMessage, request: RequestId) -> bool:
    return message.type == MessageType.RESULT and request_kind(message.id) is request


def is_device_result(message: HubMessage) -> bool:
    return _is_result_for(message, RequestId.GET_DEVICES)


def is_entity_result(message: HubMessage) -> bool:
    return _is_result_for(message, RequestId.GET_ENTITIES)


def is_area_result(message: HubMessage) -> bool:
    return _is_result_for(message, RequestId.GET_AREAS)


def entity_domain(entity_id: str) -> str:
    return entity_id.split(".", 1)[0]


def is_valid_entity(record: object, allowed_domains: Collection[str]) -> bool:
    """Check that a raw registry record belongs to one of ``allowed_domains``."""
    if not isinstance(record, dict):
        return False
    entity_id = record.get("entity_id")
    if not isinstance(entity_id, str) or not entity_id:
        return False
    return entity_domain(entity_id) in allowed_domains
