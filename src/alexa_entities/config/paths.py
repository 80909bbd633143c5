from __future__ import annotations

import os
from pathlib import Path

import platformdirs

APP_NAME = "alexa-entities"
CONFIG_FILENAME = "config.toml"
HA_ROOT_ENV_VAR = "HA_CONF_PATH"


def default_config_path() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME)) / CONFIG_FILENAME


def ha_root() -> Path:
    return Path(os.environ.get(HA_ROOT_ENV_VAR) or "/")


def default_configuration_path() -> Path:
    return ha_root() / "homeassistant" / "configuration.yaml"


def default_options_path() -> Path:
    return ha_root() / "data" / "options.json"


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))
