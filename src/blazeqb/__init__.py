"""
BlazeQB public package initialization.

Compiles statement descriptors into parameterised SQL with ``?n``
placeholders and runs them through a pluggable adapter.
"""

from .adapters import ConnectionConfig, PostgresAdapter, QueryResult, SQLiteAdapter  # noqa: F401
from .errors import (  # noqa: F401
    InvalidConfigurationError,
    MissingDataError,
    ParameterMismatchError,
    QueryBuilderError,
)
from .query import (  # noqa: F401
    ConflictType,
    FetchType,
    JoinType,
    OrderType,
    Query,
    Raw,
    Statement,
    StatementCompiler,
)
from .schema import Migration, MigrationsBuilder  # noqa: F401
from .session import QueryBuilder  # noqa: F401
from .transaction import Transaction, TransactionError  # noqa: F401

__all__ = [
    "QueryBuilder",
    "StatementCompiler",
    "Statement",
    "Query",
    "Raw",
    "FetchType",
    "OrderType",
    "JoinType",
    "ConflictType",
    "ConnectionConfig",
    "QueryResult",
    "SQLiteAdapter",
    "PostgresAdapter",
    "Transaction",
    "TransactionError",
    "Migration",
    "MigrationsBuilder",
    "QueryBuilderError",
    "MissingDataError",
    "ParameterMismatchError",
    "InvalidConfigurationError",
]
