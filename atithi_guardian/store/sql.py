from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from atithi_guardian.db import connect, init_db, is_integrity_error
from atithi_guardian.errors import AppError, DuplicateUsername, StorageFailure
from atithi_guardian.models import AdminAccount, RegistrationRecord

from .base import CredentialStore


def _debug(msg: str) -> None:
    print(f"[sql-store] {msg}")


def _admin(row: Any) -> AdminAccount:
    return AdminAccount(
        id=str(row["id"]),
        username=str(row["username"]),
        password_hash=str(row["password_hash"]),
        created_at=row["created_at"],
    )


def _registration(row: Any) -> RegistrationRecord:
    return RegistrationRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        id_hash=str(row["id_hash"]),
        days=int(row["days"]),
        created_at=str(row["created_at"]),
        expires_at=str(row["expires_at"]),
    )


class SqlStore(CredentialStore):
    """Relational store on SQLite or Postgres (see `atithi_guardian.db`)."""

    name = "sql"

    def __init__(self, db_dsn: str) -> None:
        self.db_dsn = db_dsn

    @contextmanager
    def _conn(self) -> Iterator[Any]:
        try:
            with connect(self.db_dsn) as conn:
                yield conn
        except (AppError, ValueError):
            raise
        except Exception as e:
            _debug(f"Database error: {type(e).__name__}: {e}")
            raise StorageFailure() from e

    def init(self) -> None:
        try:
            init_db(self.db_dsn)
        except Exception as e:
            raise StorageFailure("storage_init_failed") from e

    # Admins

    def find_admin_by_username(self, username: str) -> Optional[AdminAccount]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM admins WHERE username=?", (username,)).fetchone()
        return _admin(row) if row is not None else None

    def insert_admin(self, account: AdminAccount) -> None:
        with self._conn() as conn:
            existing = conn.execute("SELECT 1 FROM admins WHERE username=?", (account.username,)).fetchone()
            if existing is not None:
                raise DuplicateUsername()
            try:
                conn.execute(
                    "INSERT INTO admins (id, username, password_hash, created_at) VALUES (?,?,?,?)",
                    (account.id, account.username, account.password_hash, account.created_at),
                )
            except Exception as e:
                # Lost a race against a concurrent insert of the same username.
                if is_integrity_error(e):
                    raise DuplicateUsername() from e
                raise

    def count_admins(self) -> int:
        with self._conn() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM admins").fetchone()
        return int(row["n"])

    # Registrations

    def list_registrations(self) -> List[RegistrationRecord]:
        with self._conn() as conn:
            rows = conn.execute("SELECT * FROM registrations ORDER BY created_at DESC").fetchall()
        return [_registration(r) for r in rows]

    def get_registration(self, registration_id: str) -> Optional[RegistrationRecord]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM registrations WHERE id=?", (registration_id,)).fetchone()
        return _registration(row) if row is not None else None

    def find_registrations_by_id_hash(self, id_hash: str) -> List[RegistrationRecord]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM registrations WHERE id_hash=? ORDER BY created_at DESC",
                (id_hash,),
            ).fetchall()
        return [_registration(r) for r in rows]

    def insert_registration(self, record: RegistrationRecord) -> None:
        with self._conn() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO registrations (id, name, id_hash, days, created_at, expires_at)
                    VALUES (?,?,?,?,?,?)
                    """,
                    (
                        record.id,
                        record.name,
                        record.id_hash,
                        int(record.days),
                        record.created_at,
                        record.expires_at,
                    ),
                )
            except Exception as e:
                if is_integrity_error(e):
                    raise ValueError("registration_exists") from e
                raise

    def delete_registration(self, registration_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM registrations WHERE id=?", (registration_id,))
            return cur.rowcount > 0

    def delete_all_registrations(self) -> int:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM registrations")
            return max(0, cur.rowcount)
