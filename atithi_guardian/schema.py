"""Database schema for the relational credential store.

Timestamps are kept as ISO-8601 TEXT (UTC, with 'Z') so the same rows read back
identically from SQLite and Postgres, and so they match the JSON file store.

NOTE: The Postgres schema is generated from the SQLite schema by dropping pragmas.
"""

from __future__ import annotations


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Admin accounts. Only salted password hashes are stored.
CREATE TABLE IF NOT EXISTS admins (
    id TEXT PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT
);

-- Tourist registrations. id_hash is a one-way hash of the government ID number.
CREATE TABLE IF NOT EXISTS registrations (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    id_hash TEXT NOT NULL,
    days INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_registrations_id_hash ON registrations (id_hash);
CREATE INDEX IF NOT EXISTS idx_registrations_created_at ON registrations (created_at);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Remove SQLite pragmas
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    return "\n".join(lines)


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
