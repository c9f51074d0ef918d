"""
Clause renderers turning optional descriptor values into SQL text.

Every renderer is a pure function: it returns an empty string for an absent
clause and never touches the argument list. Argument collection happens in
the statement compilers.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..errors import InvalidConfigurationError
from .descriptors import Join, SelectAll, SelectOne, Where
from .expressions import Raw, keyword


def _columns(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def render_fields(value: Any) -> str:
    columns = _columns(value)
    return ", ".join(columns) if columns else "*"


def render_where(where: Optional[Where], *, keyword_text: str = "WHERE") -> str:
    if where is None or where.is_empty():
        return ""
    return f" {keyword_text} {' AND '.join(where.conditions)}"


def render_having(having: Optional[Where]) -> str:
    return render_where(having, keyword_text="HAVING")


def normalize_joins(value: Any) -> Tuple[Join, ...]:
    if not value:
        return ()
    items = value if isinstance(value, (list, tuple)) else [value]
    joins: List[Join] = []
    for item in items:
        join = Join.coerce(item)
        table = join.table
        if isinstance(table, Mapping):
            table = SelectAll.from_mapping(table)
        elif hasattr(table, "get_options"):
            table = table.get_options()
        if not isinstance(table, (str, SelectOne)) or not table:
            raise InvalidConfigurationError(
                "Join table must be a table name or a select descriptor",
                hint="Use {'table': 'employees', 'on': 'a.id = employees.a_id'}",
            )
        if table is not join.table:
            join = Join(table=table, on=join.on, type=join.type, alias=join.alias)
        joins.append(join)
    return tuple(joins)


def render_join(joins: Sequence[Join], subqueries: Sequence[Optional[str]]) -> str:
    """
    Render joins in the order supplied.

    ``subqueries`` holds the already compiled SQL for joins whose table is a
    select descriptor (``None`` for plain table names), position for position.
    """

    if not joins:
        return ""
    rendered: List[str] = []
    for join, subquery in zip(joins, subqueries):
        prefix = f"{keyword(join.type)} " if join.type else ""
        table = f"({subquery})" if subquery is not None else join.table
        alias = f" AS {join.alias}" if join.alias else ""
        on = f" ON {join.on}" if join.on else ""
        rendered.append(f"{prefix}JOIN {table}{alias}{on}")
    return " " + " ".join(rendered)


def render_group_by(value: Any) -> str:
    columns = _columns(value)
    if not columns:
        return ""
    return f" GROUP BY {', '.join(columns)}"


def _order_items(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Mapping):
        return [f"{column} {keyword(direction)}" for column, direction in value.items()]
    items: List[str] = []
    for entry in value:
        items.extend(_order_items(entry))
    return items


def render_order_by(value: Any) -> str:
    items = _order_items(value)
    if not items:
        return ""
    return f" ORDER BY {', '.join(items)}"


def render_limit(value: Optional[int], *, strict: bool = False) -> str:
    # Without ``strict`` a limit of 0 is treated as absent.
    if value is None or (not strict and not value):
        return ""
    return f" LIMIT {int(value)}"


def render_offset(value: Optional[int], *, strict: bool = False) -> str:
    if value is None or (not strict and not value):
        return ""
    return f" OFFSET {int(value)}"


def render_returning(value: Any) -> str:
    columns = _columns(value)
    if not columns:
        return ""
    return f" RETURNING {', '.join(columns)}"


def render_values_tuple(values: Sequence[Any], start: int) -> str:
    """
    Render one ``(...)`` VALUES tuple numbering bound values from ``start + 1``.
    """

    parts: List[str] = []
    position = start
    for value in values:
        if isinstance(value, Raw):
            parts.append(str(value.content))
        else:
            position += 1
            parts.append(f"?{position}")
    return f"({', '.join(parts)})"


def render_assignments(data: Mapping[str, Any], start: int) -> str:
    """
    Render ``col = ?n`` pairs numbering bound values from ``start + 1``.
    """

    parts: List[str] = []
    position = start
    for column, value in data.items():
        if isinstance(value, Raw):
            parts.append(f"{column} = {value.content}")
        else:
            position += 1
            parts.append(f"{column} = ?{position}")
    return ", ".join(parts)


def render_conflict_keyword(value: Any) -> str:
    if not value:
        return ""
    return f"OR {keyword(value)} "


def render_conflict_target(column: Any) -> str:
    columns = _columns(column)
    if not columns:
        raise InvalidConfigurationError(
            "Upsert requires at least one conflict column",
            hint="Set 'column' to the unique column(s) that trigger the conflict",
        )
    return f"({', '.join(columns)})"


__all__ = [
    "render_fields",
    "render_where",
    "render_having",
    "normalize_joins",
    "render_join",
    "render_group_by",
    "render_order_by",
    "render_limit",
    "render_offset",
    "render_returning",
    "render_values_tuple",
    "render_assignments",
    "render_conflict_keyword",
    "render_conflict_target",
]
