from __future__ import annotations

import threading
from typing import Dict, List, Optional

from atithi_guardian.errors import DuplicateUsername
from atithi_guardian.models import AdminAccount, RegistrationRecord

from .base import CredentialStore, newest_first


class MemoryStore(CredentialStore):
    """Process-local store. State lives as long as the instance does."""

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._admins: Dict[str, AdminAccount] = {}
        self._registrations: Dict[str, RegistrationRecord] = {}

    def find_admin_by_username(self, username: str) -> Optional[AdminAccount]:
        with self._lock:
            return self._admins.get(username)

    def insert_admin(self, account: AdminAccount) -> None:
        with self._lock:
            if account.username in self._admins:
                raise DuplicateUsername()
            self._admins[account.username] = account

    def count_admins(self) -> int:
        with self._lock:
            return len(self._admins)

    def list_registrations(self) -> List[RegistrationRecord]:
        with self._lock:
            return newest_first(list(self._registrations.values()))

    def get_registration(self, registration_id: str) -> Optional[RegistrationRecord]:
        with self._lock:
            return self._registrations.get(registration_id)

    def find_registrations_by_id_hash(self, id_hash: str) -> List[RegistrationRecord]:
        with self._lock:
            return newest_first([r for r in self._registrations.values() if r.id_hash == id_hash])

    def insert_registration(self, record: RegistrationRecord) -> None:
        with self._lock:
            if record.id in self._registrations:
                raise ValueError("registration_exists")
            self._registrations[record.id] = record

    def delete_registration(self, registration_id: str) -> bool:
        with self._lock:
            return self._registrations.pop(registration_id, None) is not None

    def delete_all_registrations(self) -> int:
        with self._lock:
            n = len(self._registrations)
            self._registrations.clear()
            return n
