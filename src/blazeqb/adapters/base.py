"""
Executor contracts shared by the BlazeQB adapters: connection settings,
the per-statement result record and the adapter protocol itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Protocol, Sequence

from ..dialects.base import Dialect
from ..query.statement import Statement
from ..security.dsns import DSNConfig, parse_dsn


class AdapterError(RuntimeError):
    """Root of every execution-time failure raised by an adapter."""


class AdapterConfigurationError(AdapterError):
    """Bad connection settings or a driver that cannot be imported."""


class AdapterConnectionError(AdapterError):
    """No usable connection to run the statement on."""


class AdapterExecutionError(AdapterError):
    """The driver rejected a statement or its bound values."""


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None

    def postgres_options(self) -> dict[str, Any]:
        pairs = {
            "sslmode": self.mode,
            "sslrootcert": self.rootcert,
            "sslcert": self.cert,
            "sslkey": self.key,
        }
        return {name: value for name, value in pairs.items() if value}


def _to_bool(key: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise AdapterConfigurationError(f"Option '{key}' expects a boolean, got {raw!r}")


def _to_number(kind: Callable[[str], Any]) -> Callable[[str, str], Any]:
    def convert(key: str, raw: str) -> Any:
        try:
            return kind(raw)
        except ValueError as exc:
            raise AdapterConfigurationError(
                f"Option '{key}' expects {kind.__name__}, got {raw!r}"
            ) from exc

    return convert


# DSN query options understood by the config itself; the rest go to the driver.
_CONFIG_OPTIONS: Dict[str, Callable[[str, str], Any]] = {
    "autocommit": _to_bool,
    "timeout": _to_number(float),
}
_DRIVER_OPTIONS: Dict[str, Callable[[str, str], Any]] = {
    "connect_timeout": _to_number(int),
}
_SSL_OPTIONS = {"sslmode": "mode", "sslrootcert": "rootcert", "sslcert": "cert", "sslkey": "key"}


@dataclass
class ConnectionConfig:
    """
    Everything an adapter needs to open a connection.
    """

    url: str
    autocommit: bool = False
    timeout: float | None = None
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **overrides: Any) -> "ConnectionConfig":
        """
        Parse ``dsn`` and split its query string into config fields, SSL
        settings and driver options. Keyword overrides win over the DSN.
        """

        try:
            parsed = parse_dsn(dsn)
        except ValueError as exc:
            raise AdapterConfigurationError(str(exc)) from exc

        settings: dict[str, Any] = {"autocommit": False, "timeout": None}
        ssl_values: dict[str, str] = {}
        driver_options: dict[str, Any] = {}
        for key, raw in parsed.query.items():
            if key in _CONFIG_OPTIONS:
                settings[key] = _CONFIG_OPTIONS[key](key, raw)
            elif key in _SSL_OPTIONS:
                ssl_values[_SSL_OPTIONS[key]] = raw
            elif key in _DRIVER_OPTIONS:
                driver_options[key] = _DRIVER_OPTIONS[key](key, raw)
            else:
                driver_options[key] = raw
        driver_options.update(overrides.pop("options", None) or {})
        settings.update(overrides)
        settings.setdefault("ssl", SSLConfig(**ssl_values) if ssl_values else None)

        return cls(url=dsn, dsn=parsed, options=driver_options or None, **settings)

    @classmethod
    def from_env(cls, env_var: str, **overrides: Any) -> "ConnectionConfig":
        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **overrides)

    def redacted_dsn(self) -> str:
        return self.dsn.redacted() if self.dsn else self.url

    def descriptive_label(self) -> str:
        """
        Name the config for log lines without leaking credentials.
        """

        redacted = self.redacted_dsn()
        return f"{self.source} ({redacted})" if self.source else redacted


@dataclass
class QueryResult:
    """
    Outcome of one executed statement.

    ``results`` is a list of row dicts for ``FetchType.ALL``, a single row
    dict (or ``None``) for ``FetchType.ONE`` and ``None`` for ``FetchType.NONE``.
    """

    success: bool = True
    results: Any = None
    changes: int = 0
    last_row_id: Any = None
    rows_read: int = 0
    rows_written: int = 0
    command: str | None = None
    duration_ms: float = 0.0
    meta: Dict[str, Any] = field(default_factory=dict)


def column_names(cursor: Any) -> List[str]:
    description = getattr(cursor, "description", None) or ()
    return [column[0] for column in description]


def row_to_dict(columns: Sequence[str], row: Any) -> Dict[str, Any]:
    if row is None:
        return {}
    if hasattr(row, "keys"):
        return {key: row[key] for key in row.keys()}
    return dict(zip(columns, row))


def statement_command(sql: str) -> str | None:
    words = sql.split(None, 1)
    return words[0].upper() if words else None


class DatabaseAdapter(Protocol):
    """
    What the query builder needs from a backend.

    ``execute`` takes driver-ready SQL; ``run`` and ``lazy_run`` take a
    compiled statement and translate it through ``dialect`` first.
    """

    dialect: Dialect
    slow_query_ms: int

    def connect(self, config: ConnectionConfig) -> Any: ...

    def close(self) -> None:
        """Release the connection. Calling it twice is harmless."""

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any: ...

    def run(self, statement: Statement) -> QueryResult: ...

    def lazy_run(self, statement: Statement) -> Iterator[Dict[str, Any]]: ...

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
