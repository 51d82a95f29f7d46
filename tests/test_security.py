from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from atithi_guardian.auth.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

from .conftest import SECRET


def test_hash_password_uses_fresh_salt() -> None:
    a = hash_password("admin123")
    b = hash_password("admin123")

    assert a != b
    assert "admin123" not in a
    assert verify_password("admin123", a)
    assert verify_password("admin123", b)


def test_verify_password_rejects_wrong_or_blank() -> None:
    h = hash_password("admin123")

    assert not verify_password("wrong", h)
    assert not verify_password("", h)
    assert not verify_password("admin123", "")


def test_verify_password_unrecognized_hash_is_false() -> None:
    assert not verify_password("admin123", "not-a-hash")


def test_hash_password_blank_raises() -> None:
    with pytest.raises(ValueError):
        hash_password("")


def test_token_payload_shape() -> None:
    issued = datetime(2025, 1, 1, tzinfo=timezone.utc)
    token = create_access_token(
        secret=SECRET,
        admin_id="admin1",
        username="admin",
        is_admin=True,
        issued_at=issued,
        ttl=timedelta(hours=24),
    )

    payload = decode_access_token(token=token, secret=SECRET)

    assert payload["id"] == "admin1"
    assert payload["username"] == "admin"
    assert payload["isAdmin"] is True
    assert payload["exp"] - payload["iat"] == 24 * 3600


def test_decode_rejects_other_secret() -> None:
    token = create_access_token(
        secret=SECRET,
        admin_id="admin1",
        username="admin",
        is_admin=True,
        issued_at=datetime.now(timezone.utc),
        ttl=timedelta(hours=24),
    )

    with pytest.raises(jwt.InvalidSignatureError):
        decode_access_token(token=token, secret=SECRET + "-other")


def test_decode_requires_exp() -> None:
    token = jwt.encode({"id": "admin1", "username": "admin", "iat": 1}, SECRET, algorithm="HS256")

    with pytest.raises(jwt.MissingRequiredClaimError):
        decode_access_token(token=token, secret=SECRET)
