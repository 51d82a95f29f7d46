from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from atithi_guardian.errors import DuplicateUsername, StorageFailure
from atithi_guardian.models import AdminAccount, RegistrationRecord

from .base import CredentialStore, newest_first


T = TypeVar("T")


def _debug(msg: str) -> None:
    print(f"[file-store] {msg}")


class FileStore(CredentialStore):
    """A single JSON document: {"registrations": [...], "admins": [...]}.

    The file is the only state. Each mutation reads the document, applies the
    change and rewrites it via a temp file + os.replace, so readers never see a
    half-written document.
    """

    name = "file"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def init(self) -> None:
        with self._lock:
            if self.path.exists():
                return
            self._write({"registrations": [], "admins": []})
            _debug(f"Created data file at {self.path}")

    # -----------------------------
    # Document I/O
    # -----------------------------

    def _read(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {"registrations": [], "admins": []}
        except OSError as e:
            raise StorageFailure("storage_read_failed") from e
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageFailure("storage_corrupt") from e
        if not isinstance(doc, dict):
            raise StorageFailure("storage_corrupt")
        for key in ("registrations", "admins"):
            doc.setdefault(key, [])
            if not isinstance(doc[key], list):
                raise StorageFailure("storage_corrupt")
        return doc

    def _write(self, doc: Dict[str, Any]) -> None:
        tmp_path: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".data_", suffix=".json", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            _debug(f"Error writing data file: {e}")
            raise StorageFailure("storage_write_failed") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def _view(self, fn: Callable[[Dict[str, Any]], T]) -> T:
        with self._lock:
            return fn(self._read())

    def _registrations(self, doc: Dict[str, Any]) -> List[RegistrationRecord]:
        return [RegistrationRecord.from_document(r) for r in doc["registrations"]]

    # -----------------------------
    # Admins
    # -----------------------------

    def find_admin_by_username(self, username: str) -> Optional[AdminAccount]:
        def _find(doc: Dict[str, Any]) -> Optional[AdminAccount]:
            for a in doc["admins"]:
                if a.get("username") == username:
                    return AdminAccount.from_document(a)
            return None

        return self._view(_find)

    def insert_admin(self, account: AdminAccount) -> None:
        with self._lock:
            doc = self._read()
            if any(a.get("username") == account.username for a in doc["admins"]):
                raise DuplicateUsername()
            doc["admins"].append(account.to_document())
            self._write(doc)

    def count_admins(self) -> int:
        return self._view(lambda doc: len(doc["admins"]))

    # -----------------------------
    # Registrations
    # -----------------------------

    def list_registrations(self) -> List[RegistrationRecord]:
        return newest_first(self._view(self._registrations))

    def get_registration(self, registration_id: str) -> Optional[RegistrationRecord]:
        for r in self._view(self._registrations):
            if r.id == registration_id:
                return r
        return None

    def find_registrations_by_id_hash(self, id_hash: str) -> List[RegistrationRecord]:
        return newest_first([r for r in self._view(self._registrations) if r.id_hash == id_hash])

    def insert_registration(self, record: RegistrationRecord) -> None:
        with self._lock:
            doc = self._read()
            if any(str(r.get("id")) == record.id for r in doc["registrations"]):
                raise ValueError("registration_exists")
            doc["registrations"].append(record.to_document())
            self._write(doc)

    def delete_registration(self, registration_id: str) -> bool:
        with self._lock:
            doc = self._read()
            kept = [r for r in doc["registrations"] if str(r.get("id")) != registration_id]
            if len(kept) == len(doc["registrations"]):
                return False
            doc["registrations"] = kept
            self._write(doc)
            return True

    def delete_all_registrations(self) -> int:
        with self._lock:
            doc = self._read()
            n = len(doc["registrations"])
            doc["registrations"] = []
            self._write(doc)
            return n
