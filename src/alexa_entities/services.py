"""Operations behind the dashboard endpoints.

Each function returns the response model the dashboard expects; failures are
raised as :class:`~alexa_entities.errors.AlexaEntitiesError` for the caller to
turn into an error response.
"""

from __future__ import annotations

from collections.abc import Sequence

from alexa_entities.config import AddonOptionsProvider, Settings, configuration_path
from alexa_entities.core import ConfigMutator, fetch_compiled_entities, websocket_connector
from alexa_entities.core.transport import Connector
from alexa_entities.models import (
    AllowlistResponse,
    ConnectionConfigResponse,
    EntitiesResponse,
    PublishResult,
)


def build_mutator(settings: Settings) -> ConfigMutator:
    return ConfigMutator(configuration_path(settings))


async def load_entities(
    settings: Settings,
    provider: AddonOptionsProvider,
    connector: Connector | None = None,
) -> EntitiesResponse:
    """Fetch the registries once and flag entities already on the allowlist."""
    allowlist = build_mutator(settings).read_allowlist()
    entities = await fetch_compiled_entities(
        provider,
        connector
        or websocket_connector(settings.hub.timeout, settings.hub.max_message_size),
        entity_domains=provider.entity_domains(settings.hub.entity_domains),
        allowlist=allowlist,
        timeout=settings.hub.timeout,
    )
    return EntitiesResponse(data=entities)


def get_allowlist(settings: Settings) -> AllowlistResponse:
    return AllowlistResponse(entity_ids=build_mutator(settings).read_allowlist())


def publish_allowlist(settings: Settings, entity_ids: Sequence[str]) -> PublishResult:
    return build_mutator(settings).update_alexa_configuration(entity_ids)


def connection_config(provider: AddonOptionsProvider) -> ConnectionConfigResponse:
    credentials = provider.get_credentials()
    return ConnectionConfigResponse(
        access_token=credentials.access_token,
        websocket_url=credentials.websocket_url,
    )
