"""
Statement compilers turning descriptors into ``Statement`` envelopes.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..errors import InvalidConfigurationError, MissingDataError, ParameterMismatchError
from ..utils import get_logger
from . import fragments, placeholders
from .conflict import compile_upsert
from .descriptors import (
    CreateTable,
    Delete,
    DropTable,
    Insert,
    SelectAll,
    SelectOne,
    Update,
    Upsert,
    Where,
)
from .expressions import FetchType, bound_values, count_bound
from .statement import Statement

COUNT_FIELDS = "count(*) as total"

logger = get_logger("query.compiler")


def _require_table(name: Any, operation: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise MissingDataError(operation, "table_name")
    return name


def _require_mapping(value: Any, label: str) -> None:
    if not isinstance(value, Mapping):
        raise InvalidConfigurationError(
            f"{label} must be a mapping of column to value, got {type(value).__name__}"
        )


def _is_subquery(value: Any) -> bool:
    return isinstance(value, SelectOne) or hasattr(value, "get_options")


class StatementCompiler:
    """
    Compile statement descriptors into SQL text, ordered arguments and a
    fetch mode.

    Compilation holds no state between calls. ``strict_limits`` renders an
    explicit ``LIMIT 0`` / ``OFFSET 0`` instead of treating zero as absent.
    """

    def __init__(self, *, strict_limits: bool = False) -> None:
        self.strict_limits = strict_limits

    # ------------------------------------------------------------------ #
    # Select
    # ------------------------------------------------------------------ #
    def select_one(self, descriptor: SelectOne | Mapping[str, Any]) -> Statement:
        select = SelectOne.coerce(descriptor)
        sql, arguments = self._select(select, limit=1)
        return Statement(sql, tuple(arguments), FetchType.ONE)

    def select_all(self, descriptor: SelectAll | Mapping[str, Any]) -> Statement:
        select = self._coerce_select(descriptor)
        sql, arguments = self._select(select, limit=getattr(select, "limit", None))
        return Statement(sql, tuple(arguments), FetchType.ALL)

    def count(self, descriptor: SelectOne | Mapping[str, Any]) -> Statement:
        select = self._coerce_select(descriptor)
        counted = SelectAll(
            table_name=select.table_name,
            fields=COUNT_FIELDS,
            where=select.where,
            join=select.join,
            having=select.having,
            order_by=select.order_by,
        )
        sql, arguments = self._select(counted, limit=1)
        return Statement(sql, tuple(arguments), FetchType.ONE)

    def _coerce_select(self, descriptor: Any) -> SelectOne:
        if isinstance(descriptor, SelectOne):
            return descriptor
        return SelectAll.coerce(descriptor)

    def _select(
        self, select: SelectOne, *, limit: Optional[int], preceding: int = 0
    ) -> Tuple[str, List[Any]]:
        # ``preceding`` counts the arguments bound before this statement's text.
        table = _require_table(select.table_name, "select")
        arguments: List[Any] = []

        joins = fragments.normalize_joins(select.join)
        subqueries: List[Optional[str]] = []
        for join in joins:
            if isinstance(join.table, SelectOne):
                sub_sql, sub_args = self._select(
                    join.table,
                    limit=getattr(join.table, "limit", None),
                    preceding=preceding + len(arguments),
                )
                subqueries.append(sub_sql)
                arguments.extend(sub_args)
            else:
                subqueries.append(None)

        where, where_args = self.compile_conditions(
            select.where, clause="WHERE", preceding=preceding + len(arguments)
        )
        arguments.extend(where_args)
        having, having_args = self.compile_conditions(
            select.having, clause="HAVING", preceding=preceding + len(arguments)
        )
        arguments.extend(having_args)

        sql = (
            f"SELECT {fragments.render_fields(select.fields)} FROM {table}"
            + fragments.render_join(joins, subqueries)
            + fragments.render_where(where)
            + fragments.render_group_by(select.group_by)
            + fragments.render_having(having)
            + fragments.render_order_by(select.order_by)
            + fragments.render_limit(limit, strict=self.strict_limits)
            + fragments.render_offset(select.offset, strict=self.strict_limits)
        )
        return sql, arguments

    # ------------------------------------------------------------------ #
    # Conditions
    # ------------------------------------------------------------------ #
    def compile_conditions(
        self, value: Any, *, clause: str, preceding: int = 0
    ) -> Tuple[Optional[Where], List[Any]]:
        """
        Normalise a WHERE/HAVING value and return it with its bound values.

        Subquery parameters are inlined in place of their bare ``?``.
        Placeholders number positions in the final argument list, after the
        ``preceding`` arguments bound by earlier clauses, so the highest
        index must land on this clause's last bound value.
        """

        where = Where.coerce(value)
        if where is None or where.is_empty():
            if where is not None and where.params:
                raise ParameterMismatchError(
                    clause=clause,
                    expected_params=0,
                    received_params=len(where.params),
                )
            return where, []
        if any(_is_subquery(param) for param in where.params):
            where = self._inline_subqueries(where, clause, preceding)
        text = " AND ".join(where.conditions)
        expected = placeholders.highest_index(text, preceding) - preceding
        if expected != len(where.params):
            raise ParameterMismatchError(
                clause=clause,
                query=text,
                expected_params=expected,
                received_params=len(where.params),
            )
        return where, list(where.params)

    def _inline_subqueries(self, where: Where, clause: str, preceding: int) -> Where:
        remaining = list(where.params)
        params: List[Any] = []
        conditions: List[str] = []
        for condition in where.conditions:
            pieces: List[str] = []
            cursor = 0
            for token in placeholders.scan(condition):
                if not token.is_bare:
                    raise InvalidConfigurationError(
                        f"Subquery parameters in {clause} require bare '?' placeholders",
                        hint="Write 'id IN ?' instead of 'id IN ?1' when passing a subquery",
                    )
                if not remaining:
                    raise ParameterMismatchError(
                        clause=clause,
                        query=condition,
                        expected_params=len(where.params) + 1,
                        received_params=len(where.params),
                    )
                pieces.append(condition[cursor : token.start])
                param = remaining.pop(0)
                if _is_subquery(param):
                    subquery = SelectAll.coerce(param) if not isinstance(param, SelectOne) else param
                    sub_sql, sub_args = self._select(
                        subquery,
                        limit=getattr(subquery, "limit", None),
                        preceding=preceding + len(params),
                    )
                    pieces.append(f"({sub_sql})")
                    params.extend(sub_args)
                else:
                    pieces.append("?")
                    params.append(param)
                cursor = token.end
            pieces.append(condition[cursor:])
            conditions.append("".join(pieces))
        if remaining:
            raise ParameterMismatchError(
                clause=clause,
                query=" AND ".join(where.conditions),
                expected_params=len(where.params) - len(remaining),
                received_params=len(where.params),
            )
        return Where(tuple(conditions), tuple(params))

    @staticmethod
    def number_conditions(where: Optional[Where]) -> Optional[Where]:
        """
        Make every placeholder in ``where`` explicit (``?`` becomes ``?n``).
        """

        if where is None or where.is_empty():
            return where
        text = placeholders.number_bare(" AND ".join(where.conditions))
        return Where((text,), where.params)

    # ------------------------------------------------------------------ #
    # Insert
    # ------------------------------------------------------------------ #
    def insert(self, descriptor: Insert | Mapping[str, Any]) -> Statement:
        insert = Insert.coerce(descriptor)
        table = _require_table(insert.table_name, "insert")
        rows, columns = self.normalize_rows(insert.data)
        fetch_type = FetchType.ONE if isinstance(insert.data, Mapping) else FetchType.ALL

        if isinstance(insert.on_conflict, (Upsert, Mapping)):
            return compile_upsert(
                self,
                table=table,
                columns=columns,
                rows=rows,
                upsert=Upsert.coerce(insert.on_conflict),
                returning=insert.returning,
                fetch_type=fetch_type,
            )

        tuples, arguments = self.render_rows(rows, start=0)
        sql = (
            f"INSERT {fragments.render_conflict_keyword(insert.on_conflict)}INTO {table} "
            f"({', '.join(columns)}) VALUES {tuples}"
            + fragments.render_returning(insert.returning)
        )
        return Statement(sql, tuple(arguments), fetch_type)

    @staticmethod
    def normalize_rows(data: Any) -> Tuple[List[List[Any]], List[str]]:
        """
        Return each row's values in the column order of the first row.
        """

        if isinstance(data, Mapping):
            rows = [data]
        elif isinstance(data, (list, tuple)):
            rows = list(data)
        elif data is None:
            rows = []
        else:
            raise InvalidConfigurationError(
                f"Insert data must be a mapping or a list of mappings, got {type(data).__name__}"
            )
        for position, row in enumerate(rows):
            if not isinstance(row, Mapping):
                raise InvalidConfigurationError(
                    f"Insert row {position} must be a mapping, got {type(row).__name__}"
                )
        if not rows or not rows[0]:
            raise MissingDataError("insert", "data")
        columns = list(rows[0].keys())
        expected = set(columns)
        values: List[List[Any]] = []
        for position, row in enumerate(rows):
            if set(row.keys()) != expected:
                raise InvalidConfigurationError(
                    f"Insert row {position} columns differ from the first row",
                    hint=f"Every row must provide exactly: {', '.join(columns)}",
                )
            values.append([row[column] for column in columns])
        return values, columns

    @staticmethod
    def render_rows(rows: Sequence[Sequence[Any]], *, start: int) -> Tuple[str, List[Any]]:
        tuples: List[str] = []
        arguments: List[Any] = []
        position = start
        for row in rows:
            tuples.append(fragments.render_values_tuple(row, position))
            position += count_bound(row)
            arguments.extend(bound_values(row))
        return ", ".join(tuples), arguments

    # ------------------------------------------------------------------ #
    # Update / Delete
    # ------------------------------------------------------------------ #
    def update(self, descriptor: Update | Mapping[str, Any]) -> Statement:
        update = Update.coerce(descriptor)
        table = _require_table(update.table_name, "update")
        if not update.data:
            raise MissingDataError("update", "data")
        _require_mapping(update.data, "Update data")
        if isinstance(update.on_conflict, (Upsert, Mapping)):
            raise InvalidConfigurationError(
                "Update only accepts a conflict keyword",
                hint="Use one of ROLLBACK, ABORT, FAIL, IGNORE, REPLACE",
            )

        where, where_args = self.compile_conditions(update.where, clause="WHERE")
        where = self.number_conditions(where)
        # WHERE values keep ?1..?w, SET values follow from ?w+1.
        _, set_offset = placeholders.offsets(len(where_args), count_bound(list(update.data.values())))

        sql = (
            f"UPDATE {fragments.render_conflict_keyword(update.on_conflict)}{table} "
            f"SET {fragments.render_assignments(update.data, set_offset)}"
            + fragments.render_where(where)
            + fragments.render_returning(update.returning)
        )
        arguments = where_args + bound_values(update.data.values())
        return Statement(sql, tuple(arguments), FetchType.ALL)

    def delete(self, descriptor: Delete | Mapping[str, Any]) -> Statement:
        delete = Delete.coerce(descriptor)
        table = _require_table(delete.table_name, "delete")
        where, arguments = self.compile_conditions(delete.where, clause="WHERE")
        if where is None or where.is_empty():
            logger.warning("Compiling DELETE without WHERE on table %s", table)

        sql = (
            f"DELETE FROM {table}"
            + fragments.render_where(where)
            + fragments.render_returning(delete.returning)
            + fragments.render_order_by(delete.order_by)
            + fragments.render_limit(delete.limit, strict=self.strict_limits)
            + fragments.render_offset(delete.offset, strict=self.strict_limits)
        )
        return Statement(sql, tuple(arguments), FetchType.ALL)

    # ------------------------------------------------------------------ #
    # DDL and raw statements
    # ------------------------------------------------------------------ #
    def create_table(self, descriptor: CreateTable | Mapping[str, Any]) -> Statement:
        create = CreateTable.coerce(descriptor)
        table = _require_table(create.table_name, "create table")
        if not create.schema or not create.schema.strip():
            raise MissingDataError("create table", "schema")
        guard = "IF NOT EXISTS " if create.if_not_exists else ""
        return Statement(f"CREATE TABLE {guard}{table} ({create.schema.strip()})")

    def drop_table(self, descriptor: DropTable | Mapping[str, Any]) -> Statement:
        drop = DropTable.coerce(descriptor)
        table = _require_table(drop.table_name, "drop table")
        guard = "IF EXISTS " if drop.if_exists else ""
        return Statement(f"DROP TABLE {guard}{table}")

    def raw(
        self,
        query: str,
        arguments: Optional[Sequence[Any]] = None,
        fetch_type: FetchType | str = FetchType.NONE,
    ) -> Statement:
        if not query or not query.strip():
            raise MissingDataError("raw", "query")
        return Statement(query, tuple(arguments or ()), FetchType(fetch_type))
