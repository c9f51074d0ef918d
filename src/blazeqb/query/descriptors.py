"""
Statement descriptors: inert descriptions of one SQL operation.

Descriptors are plain frozen dataclasses. Each can also be built from a
mapping that uses either snake_case names or the camelCase names of the
envelope contract (``tableName``, ``orderBy``, ``onConflict`` ...).
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field
from dataclasses import fields as dataclass_fields
from typing import Any, Dict, Mapping, Sequence, Tuple, Union

from ..errors import InvalidConfigurationError, MissingDataError
from .expressions import ConflictType, as_tuple

_ALIASES = {
    "tableName": "table_name",
    "groupBy": "group_by",
    "orderBy": "order_by",
    "onConflict": "on_conflict",
    "ifNotExists": "if_not_exists",
    "ifExists": "if_exists",
}

Columns = Union[str, Sequence[str], None]
OrderBy = Union[str, Sequence[Union[str, Mapping[str, str]]], Mapping[str, str], None]
Row = Mapping[str, Any]


class _MappingMixin:
    """
    ``from_mapping`` support shared by all descriptor dataclasses.
    """

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]):
        known = {f.name for f in dataclass_fields(cls)}  # type: ignore[arg-type]
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise InvalidConfigurationError(
                    f"Unknown field '{key}' for {cls.__name__}",
                    hint=f"Valid fields: {', '.join(sorted(known))}",
                )
            kwargs[name] = value
        for f in dataclass_fields(cls):  # type: ignore[arg-type]
            if f.name not in kwargs and f.default is MISSING and f.default_factory is MISSING:
                raise MissingDataError(cls.__name__.lower(), f.name)
        return cls(**kwargs)

    @classmethod
    def coerce(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        if hasattr(value, "get_options"):
            options = value.get_options()
            if isinstance(options, cls):
                return options
        raise InvalidConfigurationError(
            f"Expected {cls.__name__} or mapping, got {type(value).__name__}"
        )


@dataclass(frozen=True)
class Where:
    """
    Normalised WHERE / HAVING condition set.

    ``conditions`` are AND-joined; ``params`` are the bound values in the
    order of their placeholders.
    """

    conditions: Tuple[str, ...] = ()
    params: Tuple[Any, ...] = ()

    @classmethod
    def coerce(cls, value: Any) -> "Where | None":
        if value is None:
            return None
        if isinstance(value, Where):
            return value
        if isinstance(value, str):
            return cls((value,)) if value else None
        if isinstance(value, Mapping):
            if "conditions" not in value:
                raise InvalidConfigurationError(
                    "Structured where requires a 'conditions' entry",
                    hint="Use {'conditions': 'id = ?1', 'params': [1]}",
                )
            unknown = set(value) - {"conditions", "params"}
            if unknown:
                raise InvalidConfigurationError(
                    f"Unknown where field(s): {', '.join(sorted(unknown))}"
                )
            conditions = cls._conditions(value["conditions"])
            return cls(conditions, as_tuple(value.get("params")))
        if isinstance(value, (list, tuple)):
            return cls(cls._conditions(value))
        raise InvalidConfigurationError(
            f"Unsupported where value of type {type(value).__name__}",
            hint="Pass a string, a list of strings or {'conditions': ..., 'params': ...}",
        )

    @staticmethod
    def _conditions(value: Any) -> Tuple[str, ...]:
        items = as_tuple(value)
        for item in items:
            if not isinstance(item, str):
                raise InvalidConfigurationError(
                    f"Where conditions must be strings, got {type(item).__name__}"
                )
        return tuple(item for item in items if item)

    def is_empty(self) -> bool:
        return not self.conditions


@dataclass(frozen=True)
class Join(_MappingMixin):
    table: Any
    on: str | None = None
    type: Any = None
    alias: str | None = None


@dataclass(frozen=True)
class SelectOne(_MappingMixin):
    table_name: str
    fields: Columns = None
    where: Any = None
    join: Any = None
    group_by: Columns = None
    having: Any = None
    order_by: OrderBy = None
    offset: int | None = None


@dataclass(frozen=True)
class SelectAll(SelectOne):
    limit: int | None = None
    lazy: bool = False


@dataclass(frozen=True)
class Upsert(_MappingMixin):
    column: Columns
    data: Row
    where: Any = None


@dataclass(frozen=True)
class Insert(_MappingMixin):
    table_name: str
    data: Union[Row, Sequence[Row]]
    returning: Columns = None
    on_conflict: Union[str, ConflictType, Upsert, Mapping[str, Any], None] = None


@dataclass(frozen=True)
class Update(_MappingMixin):
    table_name: str
    data: Row = field(default_factory=dict)
    where: Any = None
    returning: Columns = None
    on_conflict: Union[str, ConflictType, None] = None


@dataclass(frozen=True)
class Delete(_MappingMixin):
    # ``where`` may be omitted, but callers are expected to pass one.
    table_name: str
    where: Any = None
    returning: Columns = None
    order_by: OrderBy = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True)
class CreateTable(_MappingMixin):
    table_name: str
    schema: str
    if_not_exists: bool = False


@dataclass(frozen=True)
class DropTable(_MappingMixin):
    table_name: str
    if_exists: bool = False


__all__ = [
    "Where",
    "Join",
    "SelectOne",
    "SelectAll",
    "Upsert",
    "Insert",
    "Update",
    "Delete",
    "CreateTable",
    "DropTable",
]
