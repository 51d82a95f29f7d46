"""Credential stores: admin accounts and tourist registrations.

Three interchangeable backends share the `CredentialStore` contract:

- `file`: one JSON document on disk (the default for local runs)
- `memory`: process-local, seeded at startup, gone on restart
- `sql`: SQLite or Postgres tables
"""

from atithi_guardian.config import Config

from .base import CredentialStore
from .file import FileStore
from .memory import MemoryStore
from .sql import SqlStore


def open_store(cfg: Config) -> CredentialStore:
    backend = (cfg.STORE_BACKEND or "file").strip().lower()
    if backend == "file":
        return FileStore(cfg.DATA_FILE_PATH)
    if backend == "memory":
        return MemoryStore()
    if backend in ("sql", "db", "postgres", "sqlite"):
        return SqlStore(cfg.DB_DSN)
    raise ValueError(f"unknown_store_backend: {backend}")


__all__ = [
    "CredentialStore",
    "FileStore",
    "MemoryStore",
    "SqlStore",
    "open_store",
]
