"""
Declarative Schema Definition - THE single source of truth.

Every table and index for FocusFlow lives here. Nothing else defines
schema. The schema_engine reads this and converges any database to match.

Adding a column = add one line here. The engine handles the rest.

Column definitions use CREATE TABLE syntax. The schema_engine knows how
to derive ALTER TABLE ADD COLUMN DDL (strips PK, adjusts NOT NULL, etc.).
"""

from collections import OrderedDict

# =============================================================================
# Schema version - bump when you change this file
# =============================================================================
SCHEMA_VERSION = 2

# =============================================================================
# Table Definitions
#
# Format: TABLES[name] = {"columns": [(col_name, col_ddl), ...],
#                         "checks": [expr, ...]}
#
# col_ddl is the full column definition as used in CREATE TABLE.
# "checks" are table-level CHECK constraints, only applied on CREATE.
# =============================================================================

TABLES: dict[str, dict] = OrderedDict()

# ---------------------------------------------------------------------------
# owners - opaque caller identities, kept only for the cascade rule
# ---------------------------------------------------------------------------
TABLES["owners"] = {
    "columns": [
        ("id", "TEXT PRIMARY KEY"),
        ("created_at", "TEXT NOT NULL"),
    ],
}

# ---------------------------------------------------------------------------
# time_blocks - instants stored as fixed-width UTC text (see focusflow.clock)
# ---------------------------------------------------------------------------
TABLES["time_blocks"] = {
    "columns": [
        ("id", "TEXT PRIMARY KEY"),
        ("owner_id", "TEXT NOT NULL REFERENCES owners(id) ON DELETE CASCADE"),
        ("title", "TEXT NOT NULL"),
        ("description", "TEXT"),
        ("start_time", "TEXT NOT NULL"),
        ("end_time", "TEXT NOT NULL"),
        ("created_at", "TEXT NOT NULL"),
        ("updated_at", "TEXT NOT NULL"),
    ],
    "checks": [
        "start_time < end_time",
        "length(title) BETWEEN 1 AND 200",
    ],
}

# =============================================================================
# Indexes: (name, table, columns, where)
# =============================================================================

INDEXES: list[tuple[str, str, str, str | None]] = [
    ("idx_time_blocks_owner_id", "time_blocks", "owner_id", None),
    ("idx_time_blocks_owner_start", "time_blocks", "owner_id, start_time", None),
    ("idx_time_blocks_start_time", "time_blocks", "start_time", None),
]
