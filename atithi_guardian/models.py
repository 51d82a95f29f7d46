from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AdminAccount:
    id: str
    username: str
    password_hash: str
    created_at: Optional[str] = None

    def public(self) -> Dict[str, Any]:
        # Never expose the hash.
        return {"id": self.id, "username": self.username}

    def to_document(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "username": self.username,
            "passwordHash": self.password_hash,
        }
        if self.created_at:
            d["createdAt"] = self.created_at
        return d

    @classmethod
    def from_document(cls, d: Dict[str, Any]) -> "AdminAccount":
        return cls(
            id=str(d["id"]),
            username=str(d["username"]),
            password_hash=str(d.get("passwordHash") or d.get("password_hash") or ""),
            created_at=d.get("createdAt") or d.get("created_at"),
        )


@dataclass(frozen=True)
class RegistrationRecord:
    id: str
    name: str
    id_hash: str
    days: int
    created_at: str
    expires_at: str

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "idHash": self.id_hash,
            "days": self.days,
            "createdAt": self.created_at,
            "expiresAt": self.expires_at,
        }

    @classmethod
    def from_document(cls, d: Dict[str, Any]) -> "RegistrationRecord":
        return cls(
            id=str(d["id"]),
            name=str(d.get("name") or ""),
            id_hash=str(d.get("idHash") or d.get("id_hash") or ""),
            days=int(d.get("days") or 0),
            created_at=str(d.get("createdAt") or d.get("created_at") or ""),
            expires_at=str(d.get("expiresAt") or d.get("expires_at") or ""),
        )


@dataclass(frozen=True)
class Claims:
    """Decoded session token payload."""

    id: str
    username: str
    is_admin: bool
    issued_at: int
    expires_at: int
