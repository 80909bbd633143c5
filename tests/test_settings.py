from __future__ import annotations

from pathlib import Path

import pytest

from alexa_entities.config import (
    DEFAULT_ENTITY_DOMAINS,
    HomeAssistantConfig,
    HubConfig,
    Settings,
    configuration_path,
    get_settings,
    load_settings,
    options_path,
    resolve_config_path,
    write_settings,
)


def test_defaults_without_a_config_file(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(
        "alexa_entities.config.settings.default_config_path",
        lambda: tmp_path / "config.toml",
    )

    settings = get_settings()

    assert settings.hub.entity_domains == DEFAULT_ENTITY_DOMAINS
    assert settings.hub.timeout == 10.0


def test_env_var_points_to_missing_file(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("ALEXA_ENTITIES_CONFIG", str(tmp_path / "nope.toml"))

    with pytest.raises(FileNotFoundError, match="ALEXA_ENTITIES_CONFIG"):
        resolve_config_path()

    path, exists = resolve_config_path(allow_missing=True)
    assert path == tmp_path / "nope.toml"
    assert exists is False


def test_written_settings_load_back(tmp_path: Path, monkeypatch):
    path = tmp_path / "nested" / "config.toml"
    settings = Settings(
        hub=HubConfig(entity_domains=("light", "switch"), timeout=3.5),
        homeassistant=HomeAssistantConfig(
            configuration_path=str(tmp_path / "configuration.yaml"),
            options_path=str(tmp_path / "options.json"),
        ),
    )
    write_settings(settings, path)
    monkeypatch.setenv("ALEXA_ENTITIES_CONFIG", str(path))

    assert get_settings() == settings


def test_defaults_render_with_commented_paths(tmp_path: Path):
    path = tmp_path / "config.toml"
    write_settings(Settings(), path)

    text = path.read_text()

    assert '# configuration_path = "/homeassistant/configuration.yaml"' in text
    assert load_settings(path) == Settings()


def test_invalid_toml(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[hub\n")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_settings(path)


def test_unknown_keys_are_rejected(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[hub]\nport = 8123\n")

    with pytest.raises(ValueError, match="Invalid config file"):
        load_settings(path)


def test_home_assistant_paths_follow_the_root(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HA_CONF_PATH", str(tmp_path))

    assert configuration_path(Settings()) == (
        tmp_path / "homeassistant" / "configuration.yaml"
    )
    assert options_path(Settings()) == tmp_path / "data" / "options.json"


def test_explicit_paths_expand_user(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("HOME", str(tmp_path))
    settings = Settings(
        homeassistant=HomeAssistantConfig(configuration_path="~/ha/configuration.yaml")
    )

    assert configuration_path(settings) == tmp_path / "ha" / "configuration.yaml"
