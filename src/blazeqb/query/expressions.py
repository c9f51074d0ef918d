"""
Expression primitives shared by descriptors and renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class Raw:
    """
    SQL text spliced verbatim in place of a bound value.

    ``Raw("CURRENT_TIMESTAMP")`` never consumes a placeholder and never
    reaches the argument list.
    """

    content: str

    def __str__(self) -> str:
        return str(self.content)


class FetchType(str, Enum):
    NONE = "NONE"
    ONE = "ONE"
    ALL = "ALL"


class OrderType(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    CROSS = "CROSS"


class ConflictType(str, Enum):
    ROLLBACK = "ROLLBACK"
    ABORT = "ABORT"
    FAIL = "FAIL"
    IGNORE = "IGNORE"
    REPLACE = "REPLACE"


def is_raw(value: Any) -> bool:
    return isinstance(value, Raw)


def keyword(value: Any) -> str:
    """
    Render an enum member or plain string as SQL keyword text.
    """

    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def as_tuple(value: Any) -> Tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def bound_values(values: Iterable[Any]) -> List[Any]:
    """
    Drop ``Raw`` members, keeping only the values that will be bound.
    """

    return [value for value in values if not is_raw(value)]


def count_bound(values: Sequence[Any]) -> int:
    return sum(1 for value in values if not is_raw(value))
