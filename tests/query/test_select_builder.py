import pytest

from blazeqb.errors import MissingDataError
from blazeqb.query import (
    DeleteBuilder,
    InsertBuilder,
    QueryWithCount,
    SelectAll,
    SelectBuilder,
    StatementCompiler,
    UpdateBuilder,
)


@pytest.fixture
def compiler():
    return StatementCompiler()


@pytest.fixture
def executed():
    return []


@pytest.fixture
def select(compiler, executed):
    def run(statement):
        executed.append(statement)
        return statement.query

    def fetch_all(options):
        return QueryWithCount(compiler.select_all(options), compiler.count(options), run, lazy=options.lazy)

    def fetch_one(options):
        return QueryWithCount(compiler.select_one(options), compiler.count(options), run)

    return SelectBuilder(SelectAll(table_name="users"), fetch_all=fetch_all, fetch_one=fetch_one)


def test_chaining_does_not_mutate_the_receiver(select):
    filtered = select.where("active = ?", [1])
    assert select.get_options().where is None
    assert filtered.get_options().where is not None


def test_where_calls_accumulate(select):
    query = select.fields("id").fields(["name"]).where("a = ?", [1]).where("b = ?", 2).get_query_all()
    assert query.query == "SELECT id, name FROM users WHERE a = ? AND b = ?"
    assert query.arguments == (1, 2)


def test_where_in_single_column(select):
    query = select.where_in("id", [1, 2, 3]).get_query_all()
    assert query.query == "SELECT * FROM users WHERE (id) IN (VALUES (?), (?), (?))"
    assert query.arguments == (1, 2, 3)


def test_where_in_multiple_columns(select):
    query = select.where_in(["team", "role"], [["core", "dev"], ["ops", "sre"]]).get_query_all()
    assert query.query == "SELECT * FROM users WHERE (team, role) IN (VALUES (?, ?), (?, ?))"
    assert query.arguments == ("core", "dev", "ops", "sre")


def test_where_in_without_values_is_noop(select):
    assert select.where_in("id", []).get_query_all().query == "SELECT * FROM users"


def test_full_chain(select):
    query = (
        select.table_name("employees")
        .fields(["dept", "count(*) as n"])
        .join({"table": "depts", "on": "depts.id = employees.dept_id", "type": "LEFT"})
        .group_by("dept")
        .having("count(*) > ?", [3])
        .order_by({"n": "DESC"})
        .limit(5)
        .offset(10)
        .get_query_all()
    )
    assert query.query == (
        "SELECT dept, count(*) as n FROM employees LEFT JOIN depts ON depts.id = employees.dept_id"
        " GROUP BY dept HAVING count(*) > ? ORDER BY n DESC LIMIT 5 OFFSET 10"
    )
    assert query.arguments == (3,)


def test_builder_as_join_table_and_where_param(select):
    orders = select.table_name("orders").fields("user_id").where("total > ?", [100])
    query = (
        select.join({"table": orders, "alias": "big", "on": "big.user_id = users.id"})
        .where("users.id IN ?", [orders])
        .get_query_all()
    )
    assert query.query == (
        "SELECT * FROM users JOIN (SELECT user_id FROM orders WHERE total > ?) AS big ON big.user_id = users.id"
        " WHERE users.id IN (SELECT user_id FROM orders WHERE total > ?)"
    )
    assert query.arguments == (100, 100)


def test_terminal_operations(select, executed):
    assert select.one() == "SELECT * FROM users LIMIT 1"
    assert select.count() == "SELECT count(*) as total FROM users LIMIT 1"
    assert select.all() == "SELECT * FROM users"
    assert [statement.fetch_type.value for statement in executed] == ["ONE", "ONE", "ALL"]
    assert select.get_query_all(lazy=True).lazy is True


def test_insert_update_delete_builders(compiler):
    insert = InsertBuilder("t", compile=compiler.insert).values({"a": 1}).returning("id")
    assert insert.get_query().query == "INSERT INTO t (a) VALUES (?1) RETURNING id"

    update = UpdateBuilder("t", compile=compiler.update).set({"a": 1}).set({"b": 2}).where("id = ?1", [9])
    assert update.get_query().query == "UPDATE t SET a = ?2, b = ?3 WHERE id = ?1"
    assert update.get_query().arguments == (9, 1, 2)

    delete = DeleteBuilder("t", compile=compiler.delete).where("id = ?1", [9]).order_by("id").limit(1)
    assert delete.get_query().query == "DELETE FROM t WHERE id = ?1 ORDER BY id LIMIT 1"


def test_builders_require_table_and_data(compiler):
    with pytest.raises(MissingDataError):
        InsertBuilder("t", compile=compiler.insert).get_query()
    with pytest.raises(MissingDataError):
        UpdateBuilder("", compile=compiler.update).set({"a": 1}).get_query()


def test_unbound_query_cannot_execute(compiler):
    query = InsertBuilder("t", compile=compiler.insert).values({"a": 1}).get_query()
    with pytest.raises(RuntimeError):
        query.execute()
