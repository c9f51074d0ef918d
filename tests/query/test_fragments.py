import pytest

from blazeqb.errors import InvalidConfigurationError
from blazeqb.query import fragments
from blazeqb.query.descriptors import Join, Where
from blazeqb.query.expressions import ConflictType, JoinType, OrderType, Raw


def test_absent_clauses_render_empty():
    assert fragments.render_where(None) == ""
    assert fragments.render_group_by(None) == ""
    assert fragments.render_order_by([]) == ""
    assert fragments.render_returning(None) == ""
    assert fragments.render_join((), ()) == ""
    assert fragments.render_conflict_keyword(None) == ""


def test_where_conditions_are_and_joined():
    where = Where.coerce({"conditions": ["a = ?1", "b = ?2"], "params": [1, 2]})
    assert fragments.render_where(where) == " WHERE a = ?1 AND b = ?2"
    assert fragments.render_having(Where.coerce("n > 1")) == " HAVING n > 1"


def test_order_by_enum_direction():
    assert fragments.render_order_by({"created_at": OrderType.DESC}) == " ORDER BY created_at DESC"


def test_join_rendering():
    joins = (
        Join(table="b", on="a.id = b.a_id", type=JoinType.INNER),
        Join(table="ignored", alias="s", type="CROSS"),
    )
    assert fragments.render_join(joins, [None, "SELECT 1"]) == (
        " INNER JOIN b ON a.id = b.a_id CROSS JOIN (SELECT 1) AS s"
    )


def test_join_table_must_be_name_or_select():
    with pytest.raises(InvalidConfigurationError):
        fragments.normalize_joins({"table": 42})


def test_values_tuple_skips_raw_in_numbering():
    assert fragments.render_values_tuple(["x", Raw("now()"), "y"], 4) == "(?5, now(), ?6)"


def test_assignments():
    assert fragments.render_assignments({"a": 1, "b": Raw("b + 1"), "c": 3}, 2) == "a = ?3, b = b + 1, c = ?4"


def test_conflict_keyword_and_target():
    assert fragments.render_conflict_keyword(ConflictType.ABORT) == "OR ABORT "
    assert fragments.render_conflict_target(["a", "b"]) == "(a, b)"
    with pytest.raises(InvalidConfigurationError):
        fragments.render_conflict_target(None)


def test_limit_and_offset():
    assert fragments.render_limit(5) == " LIMIT 5"
    assert fragments.render_limit(0) == ""
    assert fragments.render_limit(0, strict=True) == " LIMIT 0"
    assert fragments.render_offset(None, strict=True) == ""


def test_where_rejects_unknown_shapes():
    with pytest.raises(InvalidConfigurationError):
        Where.coerce({"conditions": "a = ?1", "values": [1]})
    with pytest.raises(InvalidConfigurationError):
        Where.coerce(12)
