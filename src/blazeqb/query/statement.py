"""
Compiled statement envelope and executor-bound query wrappers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from .expressions import FetchType

Executor = Callable[["Statement"], Any]


@dataclass(frozen=True)
class Statement:
    """
    SQL text with ``?n`` placeholders, the ordered bound values, and how many
    rows the executor should materialize.
    """

    query: str
    arguments: Tuple[Any, ...] = ()
    fetch_type: FetchType = FetchType.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "arguments": list(self.arguments),
            "fetchType": self.fetch_type.value,
        }


class Query:
    """
    A statement bound to the executor that will run it.
    """

    def __init__(
        self,
        statement: Statement,
        executor: Optional[Executor] = None,
        *,
        lazy: bool = False,
    ) -> None:
        self.statement = statement
        self.executor = executor
        self.lazy = lazy

    @property
    def query(self) -> str:
        return self.statement.query

    @property
    def arguments(self) -> Tuple[Any, ...]:
        return self.statement.arguments

    @property
    def fetch_type(self) -> FetchType:
        return self.statement.fetch_type

    def execute(self) -> Any:
        if self.executor is None:
            raise RuntimeError("Query is not bound to an executor.")
        return self.executor(self.statement)

    def to_dict(self) -> Dict[str, Any]:
        return self.statement.to_dict()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.statement!r}, lazy={self.lazy})"


class QueryWithCount(Query):
    """
    Select query carrying a companion ``count(*)`` statement.
    """

    def __init__(
        self,
        statement: Statement,
        count_statement: Statement,
        executor: Optional[Executor] = None,
        *,
        count_executor: Optional[Executor] = None,
        lazy: bool = False,
    ) -> None:
        super().__init__(statement, executor, lazy=lazy)
        self.count_statement = count_statement
        self.count_executor = count_executor or executor

    def count(self) -> Any:
        if self.count_executor is None:
            raise RuntimeError("Query is not bound to an executor.")
        return self.count_executor(self.count_statement)
