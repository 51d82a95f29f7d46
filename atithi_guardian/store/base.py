from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from atithi_guardian.models import AdminAccount, RegistrationRecord


class CredentialStore(ABC):
    """Storage for admin accounts and tourist registrations.

    Implementations raise `DuplicateUsername` from `insert_admin` when the
    username is taken and `StorageFailure` when the backing store cannot be
    read or written. A failed write leaves the previously stored state readable.
    """

    name: str = "abstract"

    def init(self) -> None:
        """Prepare the backing storage. Safe to call more than once."""

    # Admins
    @abstractmethod
    def find_admin_by_username(self, username: str) -> Optional[AdminAccount]: ...

    @abstractmethod
    def insert_admin(self, account: AdminAccount) -> None: ...

    @abstractmethod
    def count_admins(self) -> int: ...

    # Registrations
    @abstractmethod
    def list_registrations(self) -> List[RegistrationRecord]:
        """All registrations, newest first."""

    @abstractmethod
    def get_registration(self, registration_id: str) -> Optional[RegistrationRecord]: ...

    @abstractmethod
    def find_registrations_by_id_hash(self, id_hash: str) -> List[RegistrationRecord]: ...

    @abstractmethod
    def insert_registration(self, record: RegistrationRecord) -> None: ...

    @abstractmethod
    def delete_registration(self, registration_id: str) -> bool:
        """Remove one registration; False when no such id exists."""

    @abstractmethod
    def delete_all_registrations(self) -> int:
        """Remove every registration and return how many were removed."""


def newest_first(records: List[RegistrationRecord]) -> List[RegistrationRecord]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)
