"""
SQLite dialect implementation.
"""

from __future__ import annotations

from typing import Any, Final, List, Tuple

from ..query.statement import Statement


class SQLiteDialect:
    """
    SQLite understands ``?n`` natively, so statements pass through untouched.
    """

    name: Final[str] = "sqlite"
    param_style: Final[str] = "qmark"

    def translate(self, statement: Statement) -> Tuple[str, List[Any]]:
        return statement.query, list(statement.arguments)
