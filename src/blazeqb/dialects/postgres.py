"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from typing import Any, Final, List, Tuple

from ..errors import ParameterMismatchError
from ..query import placeholders
from ..query.statement import Statement


class PostgresDialect:
    """
    PostgreSQL dialect using psycopg's positional ``%s`` parameters.

    Numbered placeholders are rewritten in textual order and the argument
    list is reordered to match, so ``?2 ... ?1`` binds ``(args[1], args[0])``.
    A literal ``%`` is doubled because psycopg reads it as a format marker.
    """

    name: Final[str] = "postgresql"
    param_style: Final[str] = "format"

    def translate(self, statement: Statement) -> Tuple[str, List[Any]]:
        sql = statement.query
        arguments = list(statement.arguments)
        tokens = placeholders.scan(sql)
        indexes = placeholders.resolve_indexes(sql)
        if max(indexes, default=0) > len(arguments):
            raise ParameterMismatchError(
                clause="statement",
                query=sql,
                expected_params=max(indexes),
                received_params=len(arguments),
            )

        pieces: List[str] = []
        cursor = 0
        for token in tokens:
            pieces.append(sql[cursor : token.start].replace("%", "%%"))
            pieces.append("%s")
            cursor = token.end
        pieces.append(sql[cursor:].replace("%", "%%"))
        return "".join(pieces), [arguments[index - 1] for index in indexes]
