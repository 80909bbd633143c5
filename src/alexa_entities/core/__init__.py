from __future__ import annotations

from .mock_hub import MockHub, run_mock_hub
from .mutator import ConfigMutator, update_alexa_config, validate_entity_ids
from .sync import (
    EngineState,
    RegistrySyncEngine,
    Snapshot,
    compile_entities,
    fetch_compiled_entities,
)
from .transport import websocket_connector

__all__ = [
    "ConfigMutator",
    "EngineState",
    "MockHub",
    "RegistrySyncEngine",
    "Snapshot",
    "compile_entities",
    "fetch_compiled_entities",
    "run_mock_hub",
    "update_alexa_config",
    "validate_entity_ids",
    "websocket_connector",
]
