"""
QueryBuilder facade coordinating the statement compiler, an adapter and the
query logger hook.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, List, Mapping, Optional, Sequence, Type, TypeVar

from .adapters.base import ConnectionConfig, DatabaseAdapter, QueryResult
from .query.builder import DeleteBuilder, InsertBuilder, SelectBuilder, UpdateBuilder
from .query.compiler import StatementCompiler
from .query.descriptors import CreateTable, Delete, DropTable, Insert, SelectAll, SelectOne, Update
from .query.expressions import FetchType
from .query.statement import Query, QueryWithCount, Statement
from .utils import default_query_logger, get_logger, logged_execution
from .utils.logging import QueryLogger

if TYPE_CHECKING:
    from .schema.migration import Migration, MigrationsBuilder
    from .transaction import Transaction

D = TypeVar("D")

# Paging keys that only apply to multi-row selects; fetch_one drops them.
_FETCH_ONE_IGNORED = ("limit", "lazy")


def _descriptor(cls: Type[D], descriptor: Any, options: Mapping[str, Any]) -> D:
    if descriptor is None:
        return cls.from_mapping(options)  # type: ignore[attr-defined]
    if options:
        return cls.from_mapping({**_as_mapping(descriptor), **options})  # type: ignore[attr-defined]
    return cls.coerce(descriptor)  # type: ignore[attr-defined]


def _without(values: Mapping[str, Any], keys: Sequence[str]) -> dict:
    return {key: value for key, value in values.items() if key not in keys}


def _as_mapping(descriptor: Any) -> Mapping[str, Any]:
    if isinstance(descriptor, Mapping):
        return descriptor
    return {name: getattr(descriptor, name) for name in descriptor.__dataclass_fields__}


class QueryBuilder:
    """
    Entry point turning descriptors into executable queries.

    Descriptors may be passed as dataclasses, as mappings (snake_case or
    camelCase keys) or as keyword arguments::

        qb = QueryBuilder(SQLiteAdapter(), dsn="sqlite:///app.db")
        qb.fetch_all(table_name="users", where={"conditions": "id = ?1", "params": [1]}).execute()
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        connection_config: Optional[ConnectionConfig] = None,
        dsn: Optional[str] = None,
        logger: Optional[QueryLogger] = None,
        strict_limits: bool = False,
    ) -> None:
        self.adapter = adapter
        if connection_config is None:
            connection_config = ConnectionConfig.from_dsn(dsn or "sqlite:///:memory:")
        self.connection_config = connection_config
        self.compiler = StatementCompiler(strict_limits=strict_limits)
        self.query_logger = logger
        self.logger = get_logger("session")
        self.adapter.connect(self.connection_config)

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "QueryBuilder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.adapter.close()

    def set_debugger(self, state: bool) -> None:
        self.query_logger = default_query_logger if state else None

    # ------------------------------------------------------------------ #
    # Descriptor entry points
    # ------------------------------------------------------------------ #
    def fetch_one(self, descriptor: Any = None, /, **options: Any) -> QueryWithCount:
        if isinstance(descriptor, Mapping) or (descriptor is not None and options):
            descriptor = _without(_as_mapping(descriptor), _FETCH_ONE_IGNORED)
        select = _descriptor(SelectOne, descriptor, _without(options, _FETCH_ONE_IGNORED))
        return QueryWithCount(
            self.compiler.select_one(select),
            self.compiler.count(select),
            self.execute,
        )

    def fetch_all(self, descriptor: Any = None, /, **options: Any) -> QueryWithCount:
        select = _descriptor(SelectAll, descriptor, options)
        executor = self.lazy_execute if select.lazy else self.execute
        return QueryWithCount(
            self.compiler.select_all(select),
            self.compiler.count(select),
            executor,
            count_executor=self.execute,
            lazy=select.lazy,
        )

    def insert(self, descriptor: Any = None, /, **options: Any) -> Query:
        return Query(self.compiler.insert(_descriptor(Insert, descriptor, options)), self.execute)

    def update(self, descriptor: Any = None, /, **options: Any) -> Query:
        return Query(self.compiler.update(_descriptor(Update, descriptor, options)), self.execute)

    def delete(self, descriptor: Any = None, /, **options: Any) -> Query:
        return Query(self.compiler.delete(_descriptor(Delete, descriptor, options)), self.execute)

    def create_table(self, descriptor: Any = None, /, **options: Any) -> Query:
        return Query(
            self.compiler.create_table(_descriptor(CreateTable, descriptor, options)), self.execute
        )

    def drop_table(self, descriptor: Any = None, /, **options: Any) -> Query:
        return Query(
            self.compiler.drop_table(_descriptor(DropTable, descriptor, options)), self.execute
        )

    def raw(
        self,
        query: str,
        arguments: Optional[Sequence[Any]] = None,
        fetch_type: FetchType | str = FetchType.NONE,
    ) -> Query:
        return Query(self.compiler.raw(query, arguments, fetch_type), self.execute)

    # ------------------------------------------------------------------ #
    # Fluent entry points
    # ------------------------------------------------------------------ #
    def select(self, table_name: str) -> SelectBuilder:
        return SelectBuilder(
            SelectAll(table_name=table_name),
            fetch_all=self.fetch_all,
            fetch_one=self.fetch_one,
        )

    def insert_into(self, table_name: str) -> InsertBuilder:
        return InsertBuilder(table_name, compile=self.compiler.insert, executor=self.execute)

    def update_table(self, table_name: str) -> UpdateBuilder:
        return UpdateBuilder(table_name, compile=self.compiler.update, executor=self.execute)

    def delete_from(self, table_name: str) -> DeleteBuilder:
        return DeleteBuilder(table_name, compile=self.compiler.delete, executor=self.execute)

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def execute(self, query: Statement | Query) -> QueryResult:
        statement = self._statement(query)
        with logged_execution(statement, self.query_logger):
            return self.adapter.run(statement)

    def lazy_execute(self, query: Statement | Query) -> Iterator[dict]:
        statement = self._statement(query)
        with logged_execution(statement, self.query_logger):
            yield from self.adapter.lazy_run(statement)

    def batch_execute(self, queries: Sequence[Statement | Query]) -> List[QueryResult]:
        """
        Run every statement inside one transaction, rolling back on failure.
        """

        statements = [self._statement(query) for query in queries]
        if not statements:
            return []
        results: List[QueryResult] = []
        with logged_execution(statements, self.query_logger):
            self.adapter.begin()
            try:
                for statement in statements:
                    results.append(self.adapter.run(statement))
            except Exception:
                self.logger.warning("Batch of %d statement(s) failed; rolling back", len(statements))
                self.adapter.rollback()
                raise
            self.adapter.commit()
        return results

    # ------------------------------------------------------------------ #
    # Collaborators
    # ------------------------------------------------------------------ #
    def transaction(self) -> "Transaction":
        from .transaction import Transaction

        return Transaction(self)

    def migrations(
        self, migrations: Sequence["Migration"], *, table_name: str = "migrations"
    ) -> "MigrationsBuilder":
        from .schema.migration import MigrationsBuilder

        return MigrationsBuilder(self, migrations, table_name=table_name)

    @staticmethod
    def _statement(query: Statement | Query) -> Statement:
        if isinstance(query, Query):
            return query.statement
        if isinstance(query, Statement):
            return query
        raise TypeError(f"Expected a Statement or Query, got {type(query).__name__}")
