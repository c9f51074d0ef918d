"""
Statement descriptors, compilers and chainable builders.
"""

from .builder import DeleteBuilder, InsertBuilder, SelectBuilder, UpdateBuilder
from .compiler import StatementCompiler
from .descriptors import (
    CreateTable,
    Delete,
    DropTable,
    Insert,
    Join,
    SelectAll,
    SelectOne,
    Update,
    Upsert,
    Where,
)
from .expressions import ConflictType, FetchType, JoinType, OrderType, Raw
from .statement import Query, QueryWithCount, Statement

__all__ = [
    "Raw",
    "FetchType",
    "OrderType",
    "JoinType",
    "ConflictType",
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
    "Statement",
    "Query",
    "QueryWithCount",
    "StatementCompiler",
    "SelectBuilder",
    "InsertBuilder",
    "UpdateBuilder",
    "DeleteBuilder",
]
