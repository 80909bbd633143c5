from __future__ import annotations

from .options import (
    DEFAULT_OPTIONS,
    AddonOptions,
    AddonOptionsProvider,
    Credentials,
    build_websocket_url,
)
from .paths import (
    APP_NAME,
    CONFIG_FILENAME,
    default_config_path,
    default_configuration_path,
    default_options_path,
    expand_path,
)
from .settings import (
    CONFIG_ENV_VAR,
    DEFAULT_ENTITY_DOMAINS,
    HomeAssistantConfig,
    HubConfig,
    Settings,
    configuration_path,
    get_settings,
    load_settings,
    options_path,
    render_settings_toml,
    resolve_config_path,
    write_settings,
)

__all__ = [
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "DEFAULT_ENTITY_DOMAINS",
    "DEFAULT_OPTIONS",
    "AddonOptions",
    "AddonOptionsProvider",
    "Credentials",
    "HomeAssistantConfig",
    "HubConfig",
    "Settings",
    "build_websocket_url",
    "configuration_path",
    "default_config_path",
    "default_configuration_path",
    "default_options_path",
    "expand_path",
    "get_settings",
    "load_settings",
    "options_path",
    "render_settings_toml",
    "resolve_config_path",
    "write_settings",
]
