"""alexa-entities - choose which Home Assistant entities Alexa can see."""

from __future__ import annotations

from importlib.metadata import version

from .config import AddonOptionsProvider, Settings, get_settings
from .core import ConfigMutator, EngineState, RegistrySyncEngine, Snapshot
from .core.ha_yaml import CustomTagValue
from .errors import AlexaEntitiesError
from .models import Area, CompiledEntity, Device, Entity

__all__ = [
    "AddonOptionsProvider",
    "AlexaEntitiesError",
    "Area",
    "CompiledEntity",
    "ConfigMutator",
    "CustomTagValue",
    "Device",
    "EngineState",
    "Entity",
    "RegistrySyncEngine",
    "Settings",
    "Snapshot",
    "__version__",
    "get_settings",
]

__version__ = version("alexa-entities")
