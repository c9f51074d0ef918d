import logging

import pytest

from blazeqb.errors import ParameterMismatchError
from blazeqb.query import Delete, FetchType, StatementCompiler


@pytest.fixture
def compiler():
    return StatementCompiler()


def test_delete_with_list_conditions_and_returning(compiler):
    statement = compiler.delete(
        {"tableName": "t", "where": {"conditions": ["a = ?1", "b = ?2"], "params": ["x", 1]}, "returning": ["id"]}
    )
    assert statement.query == "DELETE FROM t WHERE a = ?1 AND b = ?2 RETURNING id"
    assert statement.arguments == ("x", 1)
    assert statement.fetch_type is FetchType.ALL


def test_clause_order(compiler):
    statement = compiler.delete(
        Delete(
            table_name="jobs",
            where={"conditions": "done = ?1", "params": [True]},
            returning="id",
            order_by={"created_at": "DESC"},
            limit=10,
            offset=5,
        )
    )
    assert statement.query == (
        "DELETE FROM jobs WHERE done = ?1 RETURNING id ORDER BY created_at DESC LIMIT 10 OFFSET 5"
    )


def test_delete_without_where_is_accepted_and_logged(compiler, caplog):
    caplog.set_level(logging.WARNING, logger="blazeqb.query.compiler")
    statement = compiler.delete({"table_name": "sessions"})
    assert statement.query == "DELETE FROM sessions"
    assert statement.arguments == ()
    assert any("without WHERE" in record.message for record in caplog.records)


def test_too_many_params(compiler):
    with pytest.raises(ParameterMismatchError) as exc_info:
        compiler.delete({"table_name": "t", "where": {"conditions": "a = ?1", "params": [1, 2]}})
    assert "Remove extra parameters" in str(exc_info.value)


def test_zero_limit_is_dropped_unless_strict():
    descriptor = {"table_name": "t", "where": "a = 1", "limit": 0, "offset": 0}
    assert StatementCompiler().delete(descriptor).query == "DELETE FROM t WHERE a = 1"
    assert StatementCompiler(strict_limits=True).delete(descriptor).query == (
        "DELETE FROM t WHERE a = 1 LIMIT 0 OFFSET 0"
    )
