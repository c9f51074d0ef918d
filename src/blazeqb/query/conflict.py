"""
``INSERT ... ON CONFLICT (...) DO UPDATE SET ...`` compilation.

Placeholder numbering follows the argument order, not the text order: the
guard WHERE values take ``?1..?g``, the DO UPDATE assignments take the next
``u`` numbers and the inserted rows take the rest. The VALUES clause still
appears first in the text and the guard last.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Sequence

from ..errors import InvalidConfigurationError, MissingDataError
from . import fragments, placeholders
from .descriptors import Upsert
from .expressions import FetchType, bound_values, count_bound
from .statement import Statement

if TYPE_CHECKING:
    from .compiler import StatementCompiler


def compile_upsert(
    compiler: "StatementCompiler",
    *,
    table: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    upsert: Upsert,
    returning: Any = None,
    fetch_type: FetchType = FetchType.ONE,
) -> Statement:
    if not upsert.data:
        raise MissingDataError("upsert", "data")
    if not isinstance(upsert.data, Mapping):
        raise InvalidConfigurationError(
            f"Upsert data must be a mapping of column to value, got {type(upsert.data).__name__}"
        )

    guard, guard_args = compiler.compile_conditions(upsert.where, clause="ON CONFLICT WHERE")
    guard = compiler.number_conditions(guard)
    update_values: List[Any] = list(upsert.data.values())
    insert_count = sum(count_bound(row) for row in rows)

    _, update_offset, insert_offset = placeholders.offsets(
        len(guard_args), count_bound(update_values), insert_count
    )
    tuples, insert_args = compiler.render_rows(rows, start=insert_offset)

    sql = (
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES {tuples}"
        f" ON CONFLICT {fragments.render_conflict_target(upsert.column)}"
        f" DO UPDATE SET {fragments.render_assignments(upsert.data, update_offset)}"
        + fragments.render_where(guard)
        + fragments.render_returning(returning)
    )
    arguments = guard_args + bound_values(update_values) + insert_args
    return Statement(sql, tuple(arguments), fetch_type)
