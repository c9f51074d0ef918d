"""
PostgreSQL executor built on psycopg.

The driver is imported on first connect so that SQLite-only installs never
need it. Compiled ``?n`` statements are translated to psycopg's ``%s`` style
by ``PostgresDialect`` before they reach the cursor.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence

from ..dialects.postgres import PostgresDialect
from ..query.expressions import FetchType
from ..query.statement import Statement
from ..security.redaction import redact_params
from ..utils import get_logger, time_call
from ..utils.logging import resolve_slow_query_ms
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterExecutionError,
    ConnectionConfig,
    DatabaseAdapter,
    QueryResult,
    column_names,
    row_to_dict,
    statement_command,
)

_FORMAT_TOKEN_RE = re.compile(r"%%|%s")


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


def _driver_options(config: ConnectionConfig) -> Dict[str, Any]:
    options = dict(config.options or {})
    if config.ssl:
        for key, value in config.ssl.postgres_options().items():
            options.setdefault(key, value)
    if config.timeout and "connect_timeout" not in options:
        options["connect_timeout"] = int(config.timeout)
    return options


@dataclass
class PostgresSession:
    connection: Any
    config: ConnectionConfig


class PostgresAdapter(DatabaseAdapter):
    """
    Adapter running compiled statements through psycopg.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = PostgresDialect()
        self.logger = get_logger("adapters.postgres")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self._session: PostgresSession | None = None

    # Connection ---------------------------------------------------------
    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "PostgresAdapter needs psycopg; install blazeqb[postgres]."
            )
        self.logger.info("Opening PostgreSQL connection to %s", config.descriptive_label())
        try:
            connection = driver.connect(config.url, **_driver_options(config))
        except Exception as exc:
            raise AdapterConnectionError(
                f"Could not connect to {config.descriptive_label()}"
            ) from exc
        connection.autocommit = bool(config.autocommit)
        self._session = PostgresSession(connection, config)
        return connection

    def close(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            session.connection.close()

    def _connection(self) -> Any:
        if self._session is None:
            raise AdapterConnectionError("PostgresAdapter is not connected.")
        if getattr(self._session.connection, "closed", False):
            self.logger.warning("PostgreSQL connection was closed by the server; reconnecting.")
            return self.connect(self._session.config)
        return self._session.connection

    # Execution ----------------------------------------------------------
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        values: List[Any] = list(params or ())
        markers = sum(1 for token in _FORMAT_TOKEN_RE.findall(sql) if token == "%s")
        if markers != len(values):
            raise AdapterExecutionError(
                f"Statement has {markers} parameter marker(s) but {len(values)} value(s) were bound."
            )
        cursor = self._connection().cursor()
        with time_call(
            "postgres.execute",
            self.logger,
            sql=sql,
            params=redact_params(values),
            threshold_ms=self.slow_query_ms,
        ):
            try:
                # Always pass a sequence so psycopg collapses ``%%``.
                cursor.execute(sql, values)
            except Exception as exc:
                raise AdapterExecutionError(f"PostgreSQL rejected statement: {exc}") from exc
        return cursor

    def run(self, statement: Statement) -> QueryResult:
        started = time.monotonic()
        sql, params = self.dialect.translate(statement)
        cursor = self.execute(sql, params)
        columns = column_names(cursor)

        if statement.fetch_type is FetchType.ALL:
            results: Any = [row_to_dict(columns, row) for row in cursor.fetchall()] if columns else []
            read = len(results)
        elif statement.fetch_type is FetchType.ONE:
            row = cursor.fetchone() if columns else None
            results = None if row is None else row_to_dict(columns, row)
            read = int(row is not None)
        else:
            results, read = None, 0

        command = statement_command(sql)
        affected = max(getattr(cursor, "rowcount", 0) or 0, 0)
        return QueryResult(
            results=results,
            changes=affected,
            rows_read=read,
            rows_written=0 if command == "SELECT" else affected,
            command=command,
            duration_ms=(time.monotonic() - started) * 1000,
        )

    def lazy_run(self, statement: Statement) -> Iterator[Dict[str, Any]]:
        sql, params = self.dialect.translate(statement)
        cursor = self.execute(sql, params)
        columns = column_names(cursor)
        try:
            for row in iter(cursor.fetchone, None):
                yield row_to_dict(columns, row)
        finally:
            cursor.close()

    # Transactions -------------------------------------------------------
    def begin(self) -> None:
        connection = self._connection()
        # Without autocommit psycopg opens the transaction on the next statement.
        if not getattr(connection, "autocommit", False):
            return
        connection.cursor().execute("BEGIN")

    def commit(self) -> None:
        self._connection().commit()

    def rollback(self) -> None:
        self._connection().rollback()
