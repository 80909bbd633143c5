from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit


@dataclass
class Redactor:
    enabled: bool = True
    visible_chars: int = 4

    def redact_token(self, token: str) -> str:
        if not self.enabled:
            return token
        if len(token) <= self.visible_chars * 2:
            return "*" * len(token)
        return f"{token[: self.visible_chars]}…({len(token)} chars)"

    def redact_url(self, url: str) -> str:
        if not self.enabled:
            return url
        parts = urlsplit(url)
        if not parts.password:
            return url
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        netloc = f"{parts.username}:***@{host}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
