"""Tourist registrations.

The frontend hashes the government ID number before it leaves the browser;
`hash_id_number` reproduces that hash (SHA-256 hex of the trimmed number) so
scripts and tests can derive the same `idHash`.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional

from atithi_guardian.models import RegistrationRecord
from atithi_guardian.store.base import CredentialStore
from atithi_guardian.util.hashing import sha256_hex
from atithi_guardian.util.time import parse_iso, to_iso, utcnow


def _debug(msg: str) -> None:
    print(f"[registrations] {msg}")


def hash_id_number(id_number: str) -> str:
    v = (id_number or "").strip()
    if not v:
        raise ValueError("id_number_blank")
    return sha256_hex(v)


def build_registration(
    *,
    name: str,
    id_hash: str,
    days: int,
    registration_id: Optional[str] = None,
    created_at: Optional[str] = None,
    expires_at: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RegistrationRecord:
    """Validate and complete a registration.

    Missing id/timestamps are filled in; `expires_at` defaults to
    `created_at + days`.
    """
    name = (name or "").strip()
    id_hash = (id_hash or "").strip()
    if not name or not id_hash or days is None:
        raise ValueError("missing_fields")
    if isinstance(days, bool) or int(days) != days or int(days) <= 0:
        raise ValueError("days_invalid")
    days = int(days)

    if created_at:
        created = parse_iso(created_at)
    else:
        created = now or utcnow()

    if expires_at:
        expires = parse_iso(expires_at)
    else:
        try:
            expires = created + timedelta(days=days)
        except OverflowError as e:
            raise ValueError("days_invalid") from e

    return RegistrationRecord(
        id=registration_id or uuid.uuid4().hex,
        name=name,
        id_hash=id_hash,
        days=days,
        created_at=to_iso(created),
        expires_at=to_iso(expires),
    )


def create_registration(store: CredentialStore, **fields) -> RegistrationRecord:
    record = build_registration(**fields)
    store.insert_registration(record)
    _debug(f"Stored registration id={record.id} days={record.days}")
    return record
