"""
Explicit transactions issued as plain ``BEGIN`` / ``COMMIT`` / ``ROLLBACK``
statements through a query builder.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .utils import get_logger

if TYPE_CHECKING:
    from .session import QueryBuilder


class TransactionError(RuntimeError):
    pass


class Transaction:
    """
    Single level transaction; nesting is rejected.

    Usable directly or as a context manager that commits on success and
    rolls back when the block raises::

        with qb.transaction():
            qb.insert(table_name="users", data={"name": "ada"}).execute()
    """

    def __init__(self, builder: "QueryBuilder") -> None:
        self.builder = builder
        self.active = False
        self.logger = get_logger("transaction")

    def begin(self) -> None:
        if self.active:
            raise TransactionError("Transaction already started; nested transactions are not supported.")
        self.builder.raw("BEGIN").execute()
        self.active = True

    def commit(self) -> None:
        if not self.active:
            raise TransactionError("No active transaction to commit.")
        self.builder.raw("COMMIT").execute()
        self.active = False

    def rollback(self) -> None:
        if not self.active:
            raise TransactionError("No active transaction to roll back.")
        self.builder.raw("ROLLBACK").execute()
        self.active = False

    def __enter__(self) -> "QueryBuilder":
        self.begin()
        return self.builder

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
            return
        self.logger.debug("Rolling back transaction after %s", exc_type.__name__)
        self.rollback()
