"""Atithi Guardian - tourist registration backend.

- Tourists register (name, hashed government ID, trip length) and get a
  record the frontend turns into a QR code.
- Admins log in with username/password, receive a 24h bearer token and can
  list, inspect and delete registrations.

Storage is pluggable (JSON file, in-memory, SQLite/Postgres); see `store`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
