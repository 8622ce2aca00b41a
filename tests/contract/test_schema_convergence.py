"""
Schema convergence contract.

The database that db.ensure_schema() produces must match focusflow.schema:
tables, columns, constraints, indexes, user_version. Old databases are
upgraded in place without losing rows.
"""

import sqlite3

import pytest

from focusflow import db, safe_sql, schema, schema_engine


@pytest.fixture
def conn(db_path):
    db.ensure_schema(db_path)
    c = db.connect(db_path)
    yield c
    c.close()


def _columns(conn, table):
    return {row[1] for row in conn.execute(safe_sql.pragma_table_info(table))}


class TestFreshDatabase:
    def test_declared_tables_and_columns_exist(self, conn):
        for table, table_def in schema.TABLES.items():
            assert _columns(conn, table) == {name for name, _ in table_def["columns"]}

    def test_declared_indexes_exist(self, conn):
        names = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")
        }
        for idx_name, *_ in schema.INDEXES:
            assert idx_name in names

    def test_user_version_stamped(self, conn):
        assert db.get_schema_version(conn) == schema.SCHEMA_VERSION

    def test_second_run_is_skipped(self, db_path, conn):
        assert db.ensure_schema(db_path)["status"] == "skipped"


class TestConstraints:
    def _insert_owner(self, conn, owner="o1"):
        conn.execute("INSERT INTO owners (id, created_at) VALUES (?, ?)", [owner, "x"])

    def _insert_block(self, conn, start, end, owner="o1", title="t"):
        conn.execute(
            "INSERT INTO time_blocks (id, owner_id, title, start_time, end_time, created_at, updated_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            ["b1", owner, title, start, end, "x", "x"],
        )

    def test_inverted_interval_rejected_by_table(self, conn):
        self._insert_owner(conn)
        with pytest.raises(sqlite3.IntegrityError):
            self._insert_block(conn, "2026-03-10T11:00:00.000000Z", "2026-03-10T10:00:00.000000Z")

    def test_empty_title_rejected_by_table(self, conn):
        self._insert_owner(conn)
        with pytest.raises(sqlite3.IntegrityError):
            self._insert_block(conn, "2026-03-10T10:00:00.000000Z", "2026-03-10T11:00:00.000000Z", title="")

    def test_unknown_owner_rejected(self, conn):
        with pytest.raises(sqlite3.IntegrityError):
            self._insert_block(conn, "2026-03-10T10:00:00.000000Z", "2026-03-10T11:00:00.000000Z", owner="ghost")


class TestUpgrade:
    def test_missing_columns_added_and_rows_kept(self, db_path):
        with db.get_connection(db_path) as c:
            c.execute("CREATE TABLE owners (id TEXT PRIMARY KEY, created_at TEXT NOT NULL)")
            c.execute(
                "CREATE TABLE time_blocks (id TEXT PRIMARY KEY, owner_id TEXT NOT NULL,"
                " title TEXT NOT NULL, start_time TEXT NOT NULL, end_time TEXT NOT NULL,"
                " created_at TEXT NOT NULL)"
            )
            c.execute("INSERT INTO owners VALUES ('o1', 'x')")
            c.execute("INSERT INTO time_blocks VALUES ('b1', 'o1', 't', 'a', 'b', 'x')")
            c.execute("PRAGMA user_version = 1")

        results = db.ensure_schema(db_path)

        assert results["previous_version"] == 1
        assert set(results["columns_added"]) == {"time_blocks.description", "time_blocks.updated_at"}
        assert results["errors"] == []
        with db.get_connection(db_path) as c:
            assert c.execute("SELECT COUNT(*) FROM time_blocks").fetchone()[0] == 1
            assert db.get_schema_version(c) == schema.SCHEMA_VERSION

    def test_create_fresh_drops_rows(self, conn):
        conn.execute("INSERT INTO owners (id, created_at) VALUES ('o1', 'x')")

        schema_engine.create_fresh(conn)

        assert conn.execute("SELECT COUNT(*) FROM owners").fetchone()[0] == 0


@pytest.mark.parametrize(
    "ddl,expected",
    [
        ("TEXT PRIMARY KEY", "TEXT"),
        ("TEXT NOT NULL", "TEXT NOT NULL DEFAULT ''"),
        ("TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE", "TEXT NOT NULL DEFAULT ''"),
        ("INTEGER DEFAULT 0", "INTEGER DEFAULT 0"),
    ],
)
def test_make_alter_safe(ddl, expected):
    assert schema_engine.make_alter_safe(ddl) == expected


@pytest.mark.parametrize("name", ["time blocks", "x;DROP TABLE owners", "1abc", ""])
def test_unsafe_identifiers_rejected(name):
    with pytest.raises(ValueError):
        safe_sql.select(name)


def test_db_info(db_path, conn):
    info = db.get_db_info(db_path)

    assert info["exists"] is True
    assert info["user_version"] == schema.SCHEMA_VERSION
    assert info["target_schema_version"] == schema.SCHEMA_VERSION
