"""DSN parsing for adapter configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .redaction import REDACTED_VALUE, redact_mapping


@dataclass
class DSNConfig:
    scheme: str
    username: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    path: str = ""
    query: dict[str, str] = field(default_factory=dict)

    @property
    def database(self) -> Optional[str]:
        return self.path.lstrip("/") or None

    @property
    def is_sqlite(self) -> bool:
        return self.scheme.startswith("sqlite")

    def redacted(self) -> str:
        """
        Return the DSN with the password and sensitive options masked.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += f":{REDACTED_VALUE}"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        result = f"{self.scheme}://{netloc}{self.path}"
        if self.query:
            result += f"?{urlencode(redact_mapping(self.query), safe='*')}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    if not parsed.scheme:
        raise ValueError(f"DSN is missing a scheme: {dsn!r}")
    return DSNConfig(
        scheme=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=parsed.port,
        path=parsed.path or "",
        query={key: values[0] for key, values in parse_qs(parsed.query).items()},
    )
