from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import alexa_entities.cli.entities as entities_cmd
from alexa_entities import __version__
from alexa_entities.cli.app import app
from alexa_entities.cli.entities import QuickFilter, filter_entities
from alexa_entities.config import HomeAssistantConfig, Settings, write_settings
from alexa_entities.errors import CredentialUnavailable
from alexa_entities.models import (
    CompiledArea,
    CompiledDevice,
    CompiledEntity,
    EntitiesResponse,
)

runner = CliRunner()

TOKEN = "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"

ENTITIES = [
    CompiledEntity(
        id="entity-1",
        entity_id="light.kitchen",
        name="Kitchen Light",
        shared=True,
        device=CompiledDevice(id="d1", name="Hue Bridge", manufacturer="Philips"),
        area=CompiledArea(area_id="a1", name="Kitchen"),
    ),
    CompiledEntity(
        id="entity-2",
        entity_id="switch.fan",
        name="Fan",
        device=CompiledDevice(id="d2", name="Smart Plug", manufacturer="TP-Link"),
        area=CompiledArea(area_id="a2", name="Bedroom"),
    ),
    CompiledEntity(id="entity-3", entity_id="automation.wake_up", name="Wake Up"),
]


@pytest.fixture
def ha_dir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "configuration.yaml").write_text("homeassistant:\n  name: Home\n")
    (tmp_path / "options.json").write_text(
        json.dumps(
            {"ha_websocket_url": "http://ha.local:8123", "ha_access_token": TOKEN}
        )
    )
    config_path = tmp_path / "config.toml"
    write_settings(
        Settings(
            homeassistant=HomeAssistantConfig(
                configuration_path=str(tmp_path / "configuration.yaml"),
                options_path=str(tmp_path / "options.json"),
            )
        ),
        config_path,
    )
    monkeypatch.setenv("ALEXA_ENTITIES_CONFIG", str(config_path))
    return tmp_path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"alexa-entities version {__version__}" in result.stdout


def test_publish_and_list(ha_dir: Path):
    result = runner.invoke(app, ["publish", "light.kitchen", "switch.fan"])
    assert result.exit_code == 0
    assert "Configuration updated successfully" in result.stdout
    assert (ha_dir / "configuration.yaml.backup").read_text() == (
        "homeassistant:\n  name: Home\n"
    )

    result = runner.invoke(app, ["allowlist", "--json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "success": True,
        "entityIds": ["light.kitchen", "switch.fan"],
    }


def test_publish_clear(ha_dir: Path):
    runner.invoke(app, ["publish", "light.kitchen"])

    result = runner.invoke(app, ["publish", "--clear", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["entitiesCount"] == 0
    assert "Allowlist is empty." in runner.invoke(app, ["allowlist"]).stdout


def test_publish_rejects_bad_ids(ha_dir: Path):
    result = runner.invoke(app, ["publish", "--json", "light.kitchen", "bad id"])

    assert result.exit_code == 1
    assert json.loads(result.stdout) == {
        "success": False,
        "message": None,
        "error": "Invalid entity ID format detected",
    }
    assert not (ha_dir / "configuration.yaml.backup").exists()


def test_publish_needs_ids_or_clear(ha_dir: Path):
    assert runner.invoke(app, ["publish"]).exit_code == 2
    assert runner.invoke(app, ["publish", "--clear", "light.kitchen"]).exit_code == 2


def test_allowlist_with_missing_configuration(ha_dir: Path):
    (ha_dir / "configuration.yaml").unlink()

    result = runner.invoke(app, ["allowlist"])

    assert result.exit_code == 1
    assert "Configuration file not found" in result.stdout


def test_entities_json(ha_dir: Path, monkeypatch):
    async def _fake_load_entities(settings, provider):
        return EntitiesResponse(data=ENTITIES)

    monkeypatch.setattr(entities_cmd, "load_entities", _fake_load_entities)

    result = runner.invoke(app, ["entities", "--json", "--filter", "unsynced"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert [e["entity_id"] for e in payload["data"]] == [
        "automation.wake_up",
        "switch.fan",
    ]


def test_entities_table(ha_dir: Path, monkeypatch):
    async def _fake_load_entities(settings, provider):
        return EntitiesResponse(data=ENTITIES)

    monkeypatch.setattr(entities_cmd, "load_entities", _fake_load_entities)

    result = runner.invoke(app, ["entities"])

    assert result.exit_code == 0
    assert "3 entities, 1 synced" in result.stdout


def test_entities_reports_failures(ha_dir: Path, monkeypatch):
    async def _fail(settings, provider):
        raise CredentialUnavailable("SUPERVISOR_TOKEN environment variable is not set")

    monkeypatch.setattr(entities_cmd, "load_entities", _fail)

    result = runner.invoke(app, ["entities", "--json"])

    assert result.exit_code == 1
    assert json.loads(result.stdout) == {
        "success": False,
        "message": "SUPERVISOR_TOKEN environment variable is not set",
        "error": None,
    }


def test_connection_redacts_the_token(ha_dir: Path):
    result = runner.invoke(app, ["connection"])

    assert result.exit_code == 0
    assert TOKEN not in result.stdout
    assert "ws://ha.local:8123/api/websocket" in result.stdout

    result = runner.invoke(app, ["connection", "--json", "--show-token"])
    assert json.loads(result.stdout)["accessToken"] == TOKEN


def test_config_show(ha_dir: Path):
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert f"Config source: {ha_dir / 'config.toml'}" in result.stdout
    assert "[hub]" in result.stdout


def test_config_init_keeps_existing_file(ha_dir: Path):
    result = runner.invoke(app, ["config", "init"])

    assert result.exit_code == 0
    assert "Config already exists" in result.stdout


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({}, ["automation.wake_up", "light.kitchen", "switch.fan"]),
        ({"quick": QuickFilter.SYNCED}, ["light.kitchen"]),
        ({"domains": ["switch", "automation"]}, ["automation.wake_up", "switch.fan"]),
        ({"search": "tp-link"}, ["switch.fan"]),
        ({"search": "kitchen philips"}, ["light.kitchen"]),
        ({"search": "kitchen tp-link"}, []),
    ],
)
def test_filter_entities(kwargs, expected):
    assert [e.entity_id for e in filter_entities(ENTITIES, **kwargs)] == expected
