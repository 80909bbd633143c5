"""Read-modify-write pipeline for the Alexa allowlist in ``configuration.yaml``.

Stages run strictly in order: validate, read, parse, backup, merge, serialize,
write. Any failure aborts the remaining stages. The backup holds the bytes as
they were read and is the only recovery mechanism; nothing is rolled back when
the final write fails.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from alexa_entities.core import ha_yaml
from alexa_entities.errors import (
    BackupError,
    ConfigNotFound,
    ConfigParseError,
    ConfigReadError,
    ConfigStructureError,
    ConfigWriteError,
    ValidationError,
)
from alexa_entities.models import PublishResult

logger = logging.getLogger(__name__)

ENTITY_ID_PATTERN = re.compile(r"^[A-Za-z_]+\.[A-Za-z0-9_]+$")
ALLOWLIST_PATH = ("alexa", "smart_home", "filter", "include_entities")
BACKUP_SUFFIX = ".backup"
SUCCESS_MESSAGE = "Configuration updated successfully"

# The configuration file and its backup are shared by the whole process.
_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _locks_guard:
        return _locks.setdefault(key, threading.Lock())


def validate_entity_ids(entity_ids: Sequence[object]) -> bool:
    return all(
        isinstance(entity_id, str) and ENTITY_ID_PATTERN.fullmatch(entity_id)
        for entity_id in entity_ids
    )


def read_configuration(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigNotFound(f"Configuration file not found at {path}") from exc
    except OSError as exc:
        raise ConfigReadError(
            f"Failed to read configuration file: {exc.strerror or exc}"
        ) from exc


def parse_configuration(raw: bytes) -> dict[str, Any]:
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(f"Failed to parse YAML: {exc}") from exc
    return ha_yaml.loads(content)


def create_backup(raw: bytes, backup_path: Path) -> None:
    try:
        backup_path.write_bytes(raw)
    except OSError as exc:
        raise BackupError(f"Failed to create backup: {exc.strerror or exc}") from exc


def update_alexa_config(
    document: dict[str, Any] | None, entity_ids: Sequence[str]
) -> dict[str, Any]:
    """Set ``alexa.smart_home.filter.include_entities`` to exactly ``entity_ids``.

    Missing, null or otherwise empty (falsy) intermediate levels are replaced
    with a mapping; any other non-mapping value on the path is reported.
    """
    if not isinstance(document, dict):
        document = {}

    node = document
    walked: list[str] = []
    for key in ALLOWLIST_PATH[:-1]:
        walked.append(key)
        child = node.get(key)
        if not child:
            child = {}
            node[key] = child
        elif not isinstance(child, dict):
            raise ConfigStructureError(
                f"Cannot update '{'.'.join(walked)}': expected a mapping, "
                f"found {child}"
            )
        node = child

    node[ALLOWLIST_PATH[-1]] = list(entity_ids)
    return document


def extract_allowlist(document: dict[str, Any]) -> list[str]:
    node: Any = document
    for key in ALLOWLIST_PATH:
        if not isinstance(node, dict):
            return []
        node = node.get(key)
    if not isinstance(node, list):
        return []
    return [str(entity_id) for entity_id in node]


def write_configuration(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except PermissionError as exc:
        raise ConfigWriteError(
            "Permission denied writing to configuration file",
            permission_denied=True,
        ) from exc
    except OSError as exc:
        raise ConfigWriteError(
            f"Failed to write configuration file: {exc.strerror or exc}"
        ) from exc


class ConfigMutator:
    """Publishes the Alexa allowlist into a Home Assistant configuration file.

    Calls for the same file are serialized with a process-wide lock. Nothing
    guards against other processes editing the file concurrently.
    """

    def __init__(self, config_path: Path, backup_path: Path | None = None) -> None:
        self._config_path = config_path
        self._backup_path = backup_path or config_path.with_name(
            config_path.name + BACKUP_SUFFIX
        )

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def backup_path(self) -> Path:
        return self._backup_path

    def read_allowlist(self) -> list[str]:
        raw = read_configuration(self._config_path)
        return extract_allowlist(parse_configuration(raw))

    def update_alexa_configuration(self, entity_ids: Sequence[str]) -> PublishResult:
        if not validate_entity_ids(entity_ids):
            raise ValidationError("Invalid entity ID format detected")

        with _lock_for(self._config_path):
            raw = read_configuration(self._config_path)
            document = parse_configuration(raw)

            create_backup(raw, self._backup_path)
            logger.debug("Backed up %s to %s", self._config_path, self._backup_path)

            updated = update_alexa_config(document, entity_ids)
            write_configuration(self._config_path, ha_yaml.dumps(updated))

        logger.info(
            "Published %d entities to %s", len(entity_ids), self._config_path
        )
        return PublishResult(message=SUCCESS_MESSAGE, entities_count=len(entity_ids))
