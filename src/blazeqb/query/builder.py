"""
Chainable builders producing descriptors and executor-bound queries.

Every chaining call returns a new builder; the receiver is never mutated.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..errors import MissingDataError
from .descriptors import Delete, Insert, SelectAll, SelectOne, Update, Where
from .expressions import as_tuple
from .statement import Executor, Query, QueryWithCount, Statement


def _extend(current: Any, addition: Any) -> List[Any]:
    return [*as_tuple(current), *as_tuple(addition)]


def _merge_where(current: Any, conditions: Any, params: Any) -> Where:
    existing = Where.coerce(current) or Where()
    addition = Where.coerce({"conditions": conditions, "params": params}) or Where()
    return Where(existing.conditions + addition.conditions, existing.params + addition.params)


def where_in_condition(fields: str | Sequence[str], values: Sequence[Any]) -> tuple[str, List[Any]]:
    """
    Build ``(cols) IN (VALUES (?, ...), ...)`` and its flattened parameters.
    """

    if isinstance(fields, str):
        tuples = ", ".join("(?)" for _ in values)
        return f"({fields}) IN (VALUES {tuples})", list(values)
    row = f"({', '.join('?' for _ in fields)})"
    tuples = ", ".join(row for _ in values)
    params = [item for value in values for item in value]
    return f"({', '.join(fields)}) IN (VALUES {tuples})", params


class SelectBuilder:
    """
    Fluent SELECT construction on top of ``SelectAll`` descriptors.
    """

    def __init__(
        self,
        options: SelectAll,
        *,
        fetch_all: Callable[[SelectAll], QueryWithCount],
        fetch_one: Callable[[SelectOne], QueryWithCount],
    ) -> None:
        self._options = options
        self._fetch_all = fetch_all
        self._fetch_one = fetch_one

    # Chaining ----------------------------------------------------------
    def table_name(self, table_name: str) -> "SelectBuilder":
        return self._clone(table_name=table_name)

    def fields(self, fields: str | Sequence[str]) -> "SelectBuilder":
        return self._clone(fields=_extend(self._options.fields, fields))

    def where(self, conditions: str | Sequence[str], params: Any = None) -> "SelectBuilder":
        return self._clone(where=_merge_where(self._options.where, conditions, params))

    def where_in(self, fields: str | Sequence[str], values: Sequence[Any]) -> "SelectBuilder":
        if not values:
            return self._clone()
        condition, params = where_in_condition(fields, values)
        return self.where(condition, params)

    def join(self, join: Any) -> "SelectBuilder":
        return self._clone(join=_extend(self._options.join, join))

    def group_by(self, group_by: str | Sequence[str]) -> "SelectBuilder":
        return self._clone(group_by=_extend(self._options.group_by, group_by))

    def having(self, conditions: str | Sequence[str], params: Any = None) -> "SelectBuilder":
        return self._clone(having=_merge_where(self._options.having, conditions, params))

    def order_by(self, order_by: Any) -> "SelectBuilder":
        return self._clone(order_by=_extend(self._options.order_by, order_by))

    def limit(self, limit: Optional[int]) -> "SelectBuilder":
        return self._clone(limit=limit)

    def offset(self, offset: Optional[int]) -> "SelectBuilder":
        return self._clone(offset=offset)

    # Terminal operations -----------------------------------------------
    def get_query_all(self, *, lazy: bool = False) -> QueryWithCount:
        return self._fetch_all(replace(self._options, lazy=lazy))

    def get_query_one(self) -> QueryWithCount:
        return self._fetch_one(self._options)

    def execute(self, *, lazy: bool = False) -> Any:
        return self.get_query_all(lazy=lazy).execute()

    def all(self, *, lazy: bool = False) -> Any:
        return self.execute(lazy=lazy)

    def one(self) -> Any:
        return self.get_query_one().execute()

    def count(self) -> Any:
        return self.get_query_one().count()

    def get_options(self) -> SelectAll:
        return self._options

    def _clone(self, **overrides: Any) -> "SelectBuilder":
        return SelectBuilder(
            replace(self._options, **overrides),
            fetch_all=self._fetch_all,
            fetch_one=self._fetch_one,
        )


class _StatementBuilder:
    operation = "statement"

    def __init__(
        self,
        table_name: str,
        *,
        compile: Callable[[Any], Statement],
        executor: Optional[Executor] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._table_name = table_name
        self._compile = compile
        self._executor = executor
        self._options: Dict[str, Any] = dict(options or {})

    def _clone(self, **overrides: Any):
        options = {**self._options, **overrides}
        return type(self)(
            self._table_name,
            compile=self._compile,
            executor=self._executor,
            options=options,
        )

    def descriptor(self) -> Any:
        raise NotImplementedError

    def get_query(self) -> Query:
        if not self._table_name:
            raise MissingDataError(self.operation, "table_name")
        return Query(self._compile(self.descriptor()), self._executor)

    def execute(self) -> Any:
        return self.get_query().execute()


class InsertBuilder(_StatementBuilder):
    operation = "insert"

    def values(self, data: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> "InsertBuilder":
        return self._clone(data=data)

    def returning(self, fields: str | Sequence[str]) -> "InsertBuilder":
        return self._clone(returning=fields)

    def on_conflict(self, action: Any) -> "InsertBuilder":
        return self._clone(on_conflict=action)

    def descriptor(self) -> Insert:
        if not self._options.get("data"):
            raise MissingDataError(self.operation, "data")
        return Insert(table_name=self._table_name, **self._options)


class UpdateBuilder(_StatementBuilder):
    operation = "update"

    def set(self, data: Mapping[str, Any]) -> "UpdateBuilder":
        return self._clone(data={**self._options.get("data", {}), **data})

    def where(self, conditions: str | Sequence[str], params: Any = None) -> "UpdateBuilder":
        return self._clone(where=_merge_where(self._options.get("where"), conditions, params))

    def returning(self, fields: str | Sequence[str]) -> "UpdateBuilder":
        return self._clone(returning=fields)

    def on_conflict(self, action: Any) -> "UpdateBuilder":
        return self._clone(on_conflict=action)

    def descriptor(self) -> Update:
        if not self._options.get("data"):
            raise MissingDataError(self.operation, "data")
        return Update(table_name=self._table_name, **self._options)


class DeleteBuilder(_StatementBuilder):
    operation = "delete"

    def where(self, conditions: str | Sequence[str], params: Any = None) -> "DeleteBuilder":
        return self._clone(where=_merge_where(self._options.get("where"), conditions, params))

    def returning(self, fields: str | Sequence[str]) -> "DeleteBuilder":
        return self._clone(returning=fields)

    def order_by(self, order_by: Any) -> "DeleteBuilder":
        return self._clone(order_by=_extend(self._options.get("order_by"), order_by))

    def limit(self, limit: Optional[int]) -> "DeleteBuilder":
        return self._clone(limit=limit)

    def offset(self, offset: Optional[int]) -> "DeleteBuilder":
        return self._clone(offset=offset)

    def descriptor(self) -> Delete:
        return Delete(table_name=self._table_name, **self._options)
