"""Data models for alexa-entities."""

from alexa_entities.models.registry import (
    Area,
    CompiledArea,
    CompiledDevice,
    CompiledEntity,
    Device,
    Entity,
)
from alexa_entities.models.responses import (
    AllowlistResponse,
    ConnectionConfigResponse,
    EntitiesResponse,
    ErrorResponse,
    PublishResult,
)

__all__ = [
    "AllowlistResponse",
    "Area",
    "CompiledArea",
    "CompiledDevice",
    "CompiledEntity",
    "ConnectionConfigResponse",
    "Device",
    "EntitiesResponse",
    "Entity",
    "ErrorResponse",
    "PublishResult",
]
