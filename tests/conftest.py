from __future__ import annotations

import pytest

from alexa_entities.config import get_settings


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "ALEXA_ENTITIES_CONFIG",
        "SUPERVISOR_TOKEN",
        "HA_WEBSOCKET_URL",
        "HA_CONF_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
