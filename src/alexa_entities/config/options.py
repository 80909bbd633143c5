"""Hub credentials from the environment or the add-on ``options.json``.

The Supervisor writes add-on options to ``/data/options.json``. Environment
variables take precedence over the file so the tool also runs outside an
add-on container.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from alexa_entities.errors import CredentialUnavailable

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "SUPERVISOR_TOKEN"
URL_ENV_VAR = "HA_WEBSOCKET_URL"
SUPERVISOR_WEBSOCKET_URL = "ws://supervisor/core/websocket"
WEBSOCKET_PATH = "/api/websocket"


class AddonOptions(BaseModel):
    """Add-on options; keys may be snake_case or camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    ha_websocket_url: str = "http://homeassistant.local:8123"
    ha_access_token: str = ""
    ha_entity_domains: tuple[str, ...] | None = None


DEFAULT_OPTIONS = AddonOptions()


@dataclass(frozen=True)
class Credentials:
    access_token: str
    websocket_url: str


def build_websocket_url(base_url: str) -> str:
    """Turn an ``http(s)://`` hub URL into its ``ws(s)://`` API endpoint.

    ``ws``/``wss`` URLs pass through unchanged. A bare host gets the
    ``/api/websocket`` path appended.
    """
    parts = urlsplit(base_url.strip())
    if parts.scheme in ("ws", "wss"):
        if not parts.netloc:
            raise CredentialUnavailable(f"Invalid Home Assistant URL: {base_url}")
        return base_url.strip()
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise CredentialUnavailable(f"Invalid Home Assistant URL: {base_url}")

    scheme = "wss" if parts.scheme == "https" else "ws"
    path = parts.path.rstrip("/") or WEBSOCKET_PATH
    return urlunsplit((scheme, parts.netloc, path, parts.query, ""))


class AddonOptionsProvider:
    """Caches add-on options and resolves hub credentials from them.

    Construct one per process and pass it to whoever needs credentials;
    :meth:`clear_cache` forces the next lookup to re-read the file.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._cached: AddonOptions | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load_options(self) -> AddonOptions:
        if self._cached is not None:
            return self._cached

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            options = AddonOptions.model_validate(data)
        except FileNotFoundError:
            logger.debug("No add-on options at %s, using defaults", self._path)
            return DEFAULT_OPTIONS
        except (OSError, ValueError, PydanticValidationError) as exc:
            logger.warning("Ignoring unreadable add-on options %s: %s", self._path, exc)
            return DEFAULT_OPTIONS

        self._cached = options
        return options

    def clear_cache(self) -> None:
        self._cached = None

    def entity_domains(self, default: tuple[str, ...]) -> tuple[str, ...]:
        return self.load_options().ha_entity_domains or default

    def get_credentials(self) -> Credentials:
        options = self.load_options()

        token = (os.environ.get(TOKEN_ENV_VAR) or options.ha_access_token).strip()
        if not token:
            raise CredentialUnavailable(
                f"{TOKEN_ENV_VAR} environment variable is not set and no "
                "ha_access_token is configured"
            )

        env_url = os.environ.get(URL_ENV_VAR)
        if env_url:
            url = build_websocket_url(env_url)
        elif options.ha_websocket_url:
            url = build_websocket_url(options.ha_websocket_url)
        else:
            url = SUPERVISOR_WEBSOCKET_URL
        return Credentials(access_token=token, websocket_url=url)
