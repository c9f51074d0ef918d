"""
Named SQL migrations applied once and tracked in a table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

from ..utils import get_logger

if TYPE_CHECKING:
    from ..session import QueryBuilder

_SQLITE_SCHEMA = """
id         INTEGER PRIMARY KEY AUTOINCREMENT,
name       TEXT UNIQUE,
applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP NOT NULL
"""

_POSTGRES_SCHEMA = """
id         SERIAL PRIMARY KEY,
name       TEXT UNIQUE,
applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP NOT NULL
"""

# Quoted literals are matched first so a ';' inside a string does not split.
_STATEMENT_RE = re.compile(r"'(?:[^']|'')*'|;")


@dataclass(frozen=True)
class Migration:
    name: str
    sql: str


def split_statements(sql: str) -> List[str]:
    """
    Split a migration script on top-level semicolons, dropping blank pieces.
    """

    statements: List[str] = []
    cursor = 0
    for match in _STATEMENT_RE.finditer(sql):
        if match.group(0) != ";":
            continue
        statements.append(sql[cursor : match.start()])
        cursor = match.end()
    statements.append(sql[cursor:])
    return [statement.strip() for statement in statements if statement.strip()]


class MigrationsBuilder:
    """
    Applies pending migrations in declaration order, each inside its own
    transaction together with the row recording it.
    """

    def __init__(
        self,
        builder: "QueryBuilder",
        migrations: Sequence[Migration],
        *,
        table_name: str = "migrations",
    ) -> None:
        self.builder = builder
        self.migrations = list(migrations)
        self.table_name = table_name
        self.logger = get_logger("schema.migration")

    def initialize(self) -> None:
        dialect = getattr(self.builder.adapter, "dialect", None)
        schema = _POSTGRES_SCHEMA if getattr(dialect, "name", "") == "postgresql" else _SQLITE_SCHEMA
        self.builder.create_table(
            table_name=self.table_name,
            schema=schema,
            if_not_exists=True,
        ).execute()

    def get_applied(self) -> List[Dict[str, Any]]:
        self.initialize()
        result = self.builder.fetch_all(table_name=self.table_name, order_by="id").execute()
        return list(result.results or [])

    def get_unapplied(self) -> List[Migration]:
        applied = {entry["name"] for entry in self.get_applied()}
        return [migration for migration in self.migrations if migration.name not in applied]

    def apply(self) -> List[Migration]:
        applied: List[Migration] = []
        for migration in self.get_unapplied():
            self.logger.info("Applying migration %s", migration.name)
            with self.builder.transaction():
                for statement in split_statements(migration.sql):
                    self.builder.raw(statement).execute()
                self.builder.insert(
                    table_name=self.table_name,
                    data={"name": migration.name},
                ).execute()
            applied.append(migration)
        if not applied:
            self.logger.debug("No pending migrations in %s", self.table_name)
        return applied
