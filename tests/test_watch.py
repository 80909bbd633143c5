from __future__ import annotations

import asyncio
import io
import json
from pathlib import Path

from rich.console import Console

from alexa_entities.cli.watch import describe, watch_registries
from alexa_entities.config import AddonOptionsProvider, HomeAssistantConfig, Settings
from alexa_entities.core import EngineState, MockHub, Snapshot


def test_describe_includes_the_error():
    snapshot = Snapshot(state=EngineState.ERROR, error="Authentication failed: nope")

    assert describe(snapshot) == (
        "[bold]error[/bold] 0 entities, 0 synced "
        "[red](Authentication failed: nope)[/red]"
    )


def test_watch_reloads_until_the_hub_goes_away(tmp_path: Path):
    (tmp_path / "configuration.yaml").write_text(
        "alexa:\n  smart_home:\n    filter:\n      include_entities:\n"
        "        - light.living_room_ceiling\n"
    )
    settings = Settings(
        homeassistant=HomeAssistantConfig(
            configuration_path=str(tmp_path / "configuration.yaml"),
            options_path=str(tmp_path / "options.json"),
        )
    )
    output = io.StringIO()
    console = Console(file=output, width=200)

    async def scenario():
        hub = MockHub(port=0)
        await hub.start()
        (tmp_path / "options.json").write_text(
            json.dumps({"ha_websocket_url": hub.url, "ha_access_token": "test-token"})
        )
        provider = AddonOptionsProvider(tmp_path / "options.json")
        watcher = asyncio.create_task(
            watch_registries(settings, provider, console, reload_interval=0.05)
        )
        async with asyncio.timeout(5.0):
            # auth plus two rounds of registry queries
            while len(hub.received) < 7:
                await asyncio.sleep(0.01)
        await hub.stop()
        return await asyncio.wait_for(watcher, timeout=5.0)

    snapshot = asyncio.run(scenario())

    assert snapshot.state is EngineState.SYNCED
    assert snapshot.connected is False
    assert snapshot.error is not None
    assert len(snapshot.entities) == 4
    assert "synced 4 entities, 1 synced" in output.getvalue()
