"""
Schema Convergence Engine - introspect, diff, apply.

Reads the declarative schema from focusflow.schema and converges any SQLite
database to match.  Two entry points:

  converge(conn)     - For existing DBs: adds missing tables/columns/indexes.
  create_fresh(conn) - For new/test DBs: drops everything and creates clean.

The engine never drops tables or columns on an existing DB.
"""

import logging
import re
import sqlite3

from focusflow import safe_sql, schema

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────
# SQLite ALTER TABLE column-safety
# ────────────────────────────────────────────────────────────

# Clauses that are valid in CREATE TABLE but not in ALTER TABLE ADD COLUMN
_STRIP_PATTERNS = [
    re.compile(r"\bPRIMARY\s+KEY\b", re.IGNORECASE),
    re.compile(r"\bAUTOINCREMENT\b", re.IGNORECASE),
    re.compile(r"\bUNIQUE\b", re.IGNORECASE),
    re.compile(r"\bREFERENCES\s+\w+\s*\([^)]*\)(\s+ON\s+DELETE\s+\w+)?", re.IGNORECASE),
    re.compile(r"\bCHECK\s*\([^)]*\)", re.IGNORECASE),
]


def make_alter_safe(col_def: str) -> str:
    """
    Transform a CREATE TABLE column definition into one safe for
    ALTER TABLE ADD COLUMN.

    SQLite restrictions on ALTER TABLE ADD COLUMN:
      - Cannot be PRIMARY KEY or AUTOINCREMENT
      - Cannot have UNIQUE constraint
      - Cannot have REFERENCES / CHECK
      - NOT NULL requires a DEFAULT (unless default is NULL)
    """
    safe = col_def
    for pattern in _STRIP_PATTERNS:
        safe = pattern.sub("", safe)

    safe = re.sub(r"\s{2,}", " ", safe).strip()

    # NOT NULL without DEFAULT → add DEFAULT ''
    has_not_null = re.search(r"\bNOT\s+NULL\b", safe, re.IGNORECASE)
    has_default = re.search(r"\bDEFAULT\b", safe, re.IGNORECASE)
    if has_not_null and not has_default:
        safe = safe + " DEFAULT ''"

    return safe


# ────────────────────────────────────────────────────────────
# Introspection helpers
# ────────────────────────────────────────────────────────────


def _get_existing_tables(conn: sqlite3.Connection) -> set[str]:
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row[0] for row in cursor.fetchall()}


def _get_existing_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    try:
        cursor = conn.execute(safe_sql.pragma_table_info(table))
        return {row[1] for row in cursor.fetchall()}
    except sqlite3.OperationalError:
        return set()


def _get_existing_indexes(conn: sqlite3.Connection) -> set[str]:
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'index' AND name NOT LIKE 'sqlite_%'"
    )
    return {row[0] for row in cursor.fetchall()}


def _build_create_sql(table_name: str, table_def: dict) -> str:
    """Build a CREATE TABLE IF NOT EXISTS statement from schema declaration."""
    parts = [f"    {col_name} {col_ddl}" for col_name, col_ddl in table_def["columns"]]
    for check in table_def.get("checks", []):
        parts.append(f"    CHECK ({check})")
    body = ",\n".join(parts)
    return f"CREATE TABLE IF NOT EXISTS [{table_name}] (\n{body}\n)"


# ────────────────────────────────────────────────────────────
# converge - the main entry point for existing databases
# ────────────────────────────────────────────────────────────


def converge(conn: sqlite3.Connection) -> dict:
    """
    Converge an existing database to match schema.TABLES.

    Algorithm:
      1. For each declared table: CREATE if missing, else ADD COLUMN
         for each missing column.
      2. Create missing indexes.
      3. Set PRAGMA user_version.

    Returns a results dict for logging.
    """
    results = {
        "tables_created": [],
        "columns_added": [],
        "indexes_created": [],
        "errors": [],
    }

    existing_tables = _get_existing_tables(conn)
    existing_indexes = _get_existing_indexes(conn)

    # ── Phase 1: Tables and columns ──────────────────────────

    for table_name, table_def in schema.TABLES.items():
        if table_name not in existing_tables:
            try:
                conn.execute(_build_create_sql(table_name, table_def))
                results["tables_created"].append(table_name)
                logger.info("schema_engine: created table %s", table_name)
            except sqlite3.OperationalError as e:
                err = f"CREATE TABLE {table_name}: {e}"
                results["errors"].append(err)
                logger.warning("schema_engine: %s", err)
            continue

        existing_cols = _get_existing_columns(conn, table_name)
        for col_name, col_ddl in table_def["columns"]:
            if col_name in existing_cols:
                continue
            try:
                conn.execute(
                    safe_sql.alter_add_column(table_name, col_name, make_alter_safe(col_ddl))
                )
                col_ref = f"{table_name}.{col_name}"
                results["columns_added"].append(col_ref)
                logger.info("schema_engine: added column %s", col_ref)
            except sqlite3.OperationalError as e:
                err = f"ADD COLUMN {table_name}.{col_name}: {e}"
                results["errors"].append(err)
                logger.warning("schema_engine: %s", err)

    # ── Phase 2: Indexes ─────────────────────────────────────

    existing_tables = _get_existing_tables(conn)

    for idx_name, idx_table, idx_cols, idx_where in schema.INDEXES:
        if idx_name in existing_indexes or idx_table not in existing_tables:
            continue
        try:
            conn.execute(safe_sql.create_index(idx_name, idx_table, idx_cols, idx_where))
            results["indexes_created"].append(idx_name)
        except sqlite3.OperationalError as e:
            err = f"CREATE INDEX {idx_name}: {e}"
            results["errors"].append(err)
            logger.warning("schema_engine: %s", err)

    # ── Phase 3: Schema version ──────────────────────────────

    conn.execute(safe_sql.pragma_user_version_set(schema.SCHEMA_VERSION))

    results["schema_version"] = schema.SCHEMA_VERSION
    return results


# ────────────────────────────────────────────────────────────
# create_fresh - for new databases and test fixtures
# ────────────────────────────────────────────────────────────


def create_fresh(conn: sqlite3.Connection) -> dict:
    """
    Create all tables from scratch.

    Drops every existing table first. Use only for brand-new databases
    and test fixtures.
    """
    existing = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    ).fetchall()
    # Children before parents so foreign keys never block the drop
    for (name,) in sorted(existing, key=lambda r: r[0] != "time_blocks"):
        conn.execute(safe_sql.drop_table(name))

    return converge(conn)
