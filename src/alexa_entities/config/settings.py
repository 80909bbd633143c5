from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import (
    default_config_path,
    default_configuration_path,
    default_options_path,
    expand_path,
)

CONFIG_ENV_VAR = "ALEXA_ENTITIES_CONFIG"

DEFAULT_ENTITY_DOMAINS = (
    "switch",
    "scene",
    "sensor",
    "binary_sensor",
    "light",
    "climate",
    "button",
    "automation",
)


class HubConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    entity_domains: tuple[str, ...] = DEFAULT_ENTITY_DOMAINS
    timeout: float = Field(default=10.0, gt=0)
    max_message_size: int = Field(default=16 * 1024 * 1024, ge=1024)


class HomeAssistantConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    configuration_path: str | None = None
    options_path: str | None = None


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    hub: HubConfig = Field(default_factory=HubConfig)
    homeassistant: HomeAssistantConfig = Field(default_factory=HomeAssistantConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def configuration_path(settings: Settings) -> Path:
    if settings.homeassistant.configuration_path:
        return expand_path(settings.homeassistant.configuration_path)
    return default_configuration_path()


def options_path(settings: Settings) -> Path:
    if settings.homeassistant.options_path:
        return expand_path(settings.homeassistant.options_path)
    return default_options_path()


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    domains = ", ".join(_toml_string(domain) for domain in settings.hub.entity_domains)
    lines = [
        "# alexa-entities configuration",
        "",
        "[hub]",
        f"entity_domains = [{domains}]",
        f"timeout = {settings.hub.timeout}",
        f"max_message_size = {settings.hub.max_message_size}",
        "",
        "[homeassistant]",
    ]
    ha = settings.homeassistant
    if ha.configuration_path:
        lines.append(f"configuration_path = {_toml_string(ha.configuration_path)}")
    else:
        lines.append("# configuration_path = \"/homeassistant/configuration.yaml\"")
    if ha.options_path:
        lines.append(f"options_path = {_toml_string(ha.options_path)}")
    else:
        lines.append("# options_path = \"/data/options.json\"")
    lines.append("")
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
