"""
SQLite executor on the standard library ``sqlite3`` module.

SQLite binds ``?n`` natively, so compiled statements run unchanged.
"""

from __future__ import annotations

import sqlite3
import time
from typing import Any, Dict, Iterator, Sequence

from ..dialects.sqlite import SQLiteDialect
from ..query.expressions import FetchType
from ..query.statement import Statement
from ..security.redaction import redact_params
from ..utils import get_logger, time_call
from ..utils.logging import resolve_slow_query_ms
from .base import (
    AdapterConnectionError,
    AdapterExecutionError,
    ConnectionConfig,
    DatabaseAdapter,
    QueryResult,
    row_to_dict,
    statement_command,
)

_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:", ":memory:"}
_URL_PREFIX = "sqlite:///"


def database_path(url: str) -> str:
    if url in _MEMORY_URLS:
        return ":memory:"
    return url[len(_URL_PREFIX) :] if url.startswith(_URL_PREFIX) else url


class SQLiteAdapter(DatabaseAdapter):
    """
    Adapter running compiled statements through ``sqlite3``.

    The connection stays in autocommit mode; a transaction exists only
    between an explicit ``BEGIN`` and ``COMMIT`` or ``ROLLBACK``.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = SQLiteDialect()
        self.logger = get_logger("adapters.sqlite")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self._connection: sqlite3.Connection | None = None

    # Connection ---------------------------------------------------------
    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        path = database_path(config.url)
        connection = sqlite3.connect(
            path,
            isolation_level=None,
            timeout=5.0 if config.timeout is None else config.timeout,
            check_same_thread=False,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        self.logger.debug("Opened SQLite database %s", path)
        self._connection = connection
        return connection

    def close(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            connection.close()

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise AdapterConnectionError("SQLiteAdapter is not connected.")
        return self._connection

    # Execution ----------------------------------------------------------
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Cursor:
        values = tuple(params or ())
        cursor = self._require_connection().cursor()
        with time_call(
            "sqlite.execute",
            self.logger,
            sql=sql,
            params=redact_params(values),
            threshold_ms=self.slow_query_ms,
        ):
            try:
                cursor.execute(sql, values)
            except sqlite3.Error as exc:
                raise AdapterExecutionError(f"SQLite rejected statement: {exc}") from exc
        return cursor

    def run(self, statement: Statement) -> QueryResult:
        started = time.monotonic()
        sql, params = self.dialect.translate(statement)
        cursor = self.execute(sql, params)

        if statement.fetch_type is FetchType.ALL:
            results: Any = [row_to_dict((), row) for row in cursor.fetchall()]
            read = len(results)
        elif statement.fetch_type is FetchType.ONE:
            row = cursor.fetchone()
            results = None if row is None else row_to_dict((), row)
            read = int(row is not None)
        else:
            results, read = None, 0

        affected = max(cursor.rowcount, 0)
        return QueryResult(
            results=results,
            changes=affected,
            last_row_id=cursor.lastrowid,
            rows_read=read,
            rows_written=affected,
            command=statement_command(sql),
            duration_ms=(time.monotonic() - started) * 1000,
        )

    def lazy_run(self, statement: Statement) -> Iterator[Dict[str, Any]]:
        sql, params = self.dialect.translate(statement)
        cursor = self.execute(sql, params)
        try:
            for row in cursor:
                yield row_to_dict((), row)
        finally:
            cursor.close()

    # Transactions -------------------------------------------------------
    def begin(self) -> None:
        self._require_connection().execute("BEGIN")

    def commit(self) -> None:
        self._require_connection().commit()

    def rollback(self) -> None:
        self._require_connection().rollback()
