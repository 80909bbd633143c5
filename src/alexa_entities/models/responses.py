"""Response payloads served to the dashboard.

Field names follow the dashboard's camelCase JSON; dump with
``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from alexa_entities.models.registry import CompiledEntity


class _Response(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True


class EntitiesResponse(_Response):
    data: list[CompiledEntity]


class AllowlistResponse(_Response):
    entity_ids: list[str]


class PublishResult(_Response):
    message: str
    entities_count: int


class ConnectionConfigResponse(_Response):
    access_token: str
    websocket_url: str


class ErrorResponse(_Response):
    success: bool = False
    message: str | None = None
    error: str | None = None
