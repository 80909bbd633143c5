from __future__ import annotations


class AlexaEntitiesError(Exception):
    """Base class for every error raised by alexa-entities."""


class CredentialUnavailable(AlexaEntitiesError):
    """The credential provider could not supply an access token or hub URL."""


class TransportError(AlexaEntitiesError):
    """Connect, send or receive failed on the hub connection."""


class TransportClosed(TransportError):
    """The hub connection was closed, by either side."""


class DecodeError(AlexaEntitiesError):
    """A single inbound frame could not be decoded."""


class ConfigMutationError(AlexaEntitiesError):
    """A stage of the configuration pipeline failed."""

    stage = "unknown"


class ValidationError(ConfigMutationError):
    stage = "validate"


class ConfigNotFound(ConfigMutationError):
    stage = "read"


class ConfigReadError(ConfigMutationError):
    stage = "read"


class ConfigParseError(ConfigMutationError):
    stage = "parse"


class ConfigStructureError(ConfigParseError):
    """A node on the allowlist path exists but is not a mapping."""

    stage = "merge"


class BackupError(ConfigMutationError):
    stage = "backup"


class ConfigWriteError(ConfigMutationError):
    stage = "write"

    def __init__(self, message: str, *, permission_denied: bool = False) -> None:
        super().__init__(message)
        self.permission_denied = permission_denied


class AuthenticationFailed(TransportError):
    """The hub rejected the access token."""
