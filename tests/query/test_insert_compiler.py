import pytest

from blazeqb.errors import InvalidConfigurationError, MissingDataError
from blazeqb.query import ConflictType, FetchType, Insert, Raw, StatementCompiler


@pytest.fixture
def compiler():
    return StatementCompiler()


def test_single_row_insert(compiler):
    statement = compiler.insert({"tableName": "t", "data": {"a": "x"}})
    assert statement.query == "INSERT INTO t (a) VALUES (?1)"
    assert statement.arguments == ("x",)
    assert statement.fetch_type is FetchType.ONE


def test_bulk_insert_with_conflict_keyword(compiler):
    statement = compiler.insert(
        {"tableName": "t", "data": [{"a": 1}, {"a": 2}], "onConflict": "REPLACE"}
    )
    assert statement.query == "INSERT OR REPLACE INTO t (a) VALUES (?1), (?2)"
    assert statement.arguments == (1, 2)
    assert statement.fetch_type is FetchType.ALL


def test_conflict_enum_and_returning(compiler):
    statement = compiler.insert(
        Insert(
            table_name="employees",
            data={"name": "Joe", "role": "manager"},
            returning=["id", "name"],
            on_conflict=ConflictType.IGNORE,
        )
    )
    assert statement.query == (
        "INSERT OR IGNORE INTO employees (name, role) VALUES (?1, ?2) RETURNING id, name"
    )
    assert statement.arguments == ("Joe", "manager")


def test_raw_values_are_spliced_and_not_bound(compiler):
    statement = compiler.insert(
        {"table_name": "logs", "data": {"msg": "hi", "created_at": Raw("CURRENT_TIMESTAMP"), "level": 3}}
    )
    assert statement.query == "INSERT INTO logs (msg, created_at, level) VALUES (?1, CURRENT_TIMESTAMP, ?2)"
    assert statement.arguments == ("hi", 3)


def test_bulk_insert_numbers_across_rows_with_raw(compiler):
    statement = compiler.insert(
        {
            "table_name": "t",
            "data": [
                {"a": Raw("NULL"), "b": 1},
                {"a": "x", "b": 2},
            ],
        }
    )
    assert statement.query == "INSERT INTO t (a, b) VALUES (NULL, ?1), (?2, ?3)"
    assert statement.arguments == (1, "x", 2)


def test_rows_follow_first_row_column_order(compiler):
    statement = compiler.insert({"table_name": "t", "data": [{"a": 1, "b": 2}, {"b": 4, "a": 3}]})
    assert statement.query == "INSERT INTO t (a, b) VALUES (?1, ?2), (?3, ?4)"
    assert statement.arguments == (1, 2, 3, 4)


def test_rows_with_different_columns_are_rejected(compiler):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        compiler.insert({"table_name": "t", "data": [{"a": 1}, {"b": 2}]})
    assert "row 1" in str(exc_info.value)


@pytest.mark.parametrize("data", [[("a", 1)], [{"a": 1}, ("a", 2)], "a=1"])
def test_non_mapping_rows_are_rejected(compiler, data):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        compiler.insert({"table_name": "t", "data": data})
    assert "must be a mapping" in str(exc_info.value)


@pytest.mark.parametrize("data", [{}, []])
def test_empty_data_is_rejected(compiler, data):
    with pytest.raises(MissingDataError) as exc_info:
        compiler.insert({"table_name": "t", "data": data})
    assert str(exc_info.value).startswith("data is required for insert operation")


def test_missing_table_is_rejected(compiler):
    with pytest.raises(MissingDataError):
        compiler.insert({"data": {"a": 1}})


def test_unknown_descriptor_key_is_rejected(compiler):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        compiler.insert({"table_name": "t", "data": {"a": 1}, "colums": ["a"]})
    assert "colums" in str(exc_info.value)
