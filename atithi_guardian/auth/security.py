from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict

import jwt
from passlib.context import CryptContext


_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_JWT_ALG = "HS256"


def hash_password(password: str) -> str:
    """Salted, iterated hash. A fresh random salt is drawn on every call."""
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unrecognized or malformed hash.
        return False


def create_access_token(
    *,
    secret: str,
    admin_id: str,
    username: str,
    is_admin: bool,
    issued_at: datetime,
    ttl: timedelta,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")

    exp = issued_at + ttl
    payload: Dict[str, Any] = {
        "id": admin_id,
        "username": username,
        "isAdmin": bool(is_admin),
        "iat": int(issued_at.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def decode_access_token(*, token: str, secret: str) -> Dict[str, Any]:
    """Check the signature and return the payload.

    Expiry is compared by the caller against its own clock, so only the presence
    of `exp` and `iat` is enforced here.
    """
    if not token:
        raise ValueError("token_blank")
    if not secret:
        raise ValueError("jwt_secret_blank")
    return jwt.decode(
        token,
        secret,
        algorithms=[_JWT_ALG],
        options={"verify_exp": False, "verify_iat": False, "require": ["exp", "iat"]},
    )
