import pytest

from blazeqb import Migration, QueryBuilder, SQLiteAdapter
from blazeqb.adapters import AdapterExecutionError
from blazeqb.schema import split_statements

MIGRATIONS = [
    Migration(
        name="100000000000000_add_logs_table",
        sql="""
        create table logs (id INTEGER PRIMARY KEY AUTOINCREMENT, message TEXT NOT NULL);
        insert into logs (message) values ('created; ok');
        """,
    ),
    Migration(name="100000000000001_add_level", sql="alter table logs add column level TEXT"),
]


@pytest.fixture
def qb(tmp_path):
    builder = QueryBuilder(SQLiteAdapter(), dsn=f"sqlite:///{tmp_path / 'migrations.db'}")
    yield builder
    builder.close()


def test_split_statements_ignores_semicolons_in_literals():
    assert split_statements("a; b 'x;y' ;\n ;c") == ["a", "b 'x;y'", "c"]


def test_apply_runs_pending_migrations_once(qb):
    migrations = qb.migrations(MIGRATIONS)
    assert [m.name for m in migrations.get_unapplied()] == [m.name for m in MIGRATIONS]

    applied = migrations.apply()
    assert applied == MIGRATIONS
    assert [entry["name"] for entry in migrations.get_applied()] == [m.name for m in MIGRATIONS]
    assert migrations.get_unapplied() == []
    assert migrations.apply() == []

    row = qb.fetch_one(table_name="logs").execute().results
    assert row["message"] == "created; ok"


def test_custom_tracking_table(qb):
    qb.migrations(MIGRATIONS[:1], table_name="schema_history").apply()
    assert qb.fetch_all(table_name="schema_history").execute().results[0]["name"] == MIGRATIONS[0].name


def test_failed_migration_is_rolled_back(qb):
    broken = Migration(name="2_broken", sql="create table a (id INTEGER); insert into missing values (1)")
    migrations = qb.migrations([broken])
    with pytest.raises(AdapterExecutionError):
        migrations.apply()
    assert migrations.get_applied() == []
    assert [m.name for m in migrations.get_unapplied()] == ["2_broken"]
