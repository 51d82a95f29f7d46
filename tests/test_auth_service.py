from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from atithi_guardian.auth import AuthService
from atithi_guardian.auth.security import verify_password
from atithi_guardian.errors import DuplicateUsername, Forbidden, InvalidCredentials, InvalidToken
from atithi_guardian.models import Claims
from atithi_guardian.store import MemoryStore

from .conftest import PROVISIONING_KEY, SECRET


# -----------------------------
# authenticate
# -----------------------------


def test_authenticate_default_admin(auth: AuthService) -> None:
    admin, token = auth.authenticate("admin", "admin123")

    assert admin == {"id": "admin1", "username": "admin"}
    claims = auth.verify_token(token)
    assert claims.username == "admin"
    assert claims.id == "admin1"
    assert claims.is_admin is True


def test_authenticate_wrong_password(auth: AuthService) -> None:
    with pytest.raises(InvalidCredentials):
        auth.authenticate("admin", "wrong")


def test_authenticate_unknown_user(auth: AuthService) -> None:
    with pytest.raises(InvalidCredentials):
        auth.authenticate("nope", "admin123")


def test_unknown_user_and_wrong_password_are_indistinguishable(auth: AuthService) -> None:
    with pytest.raises(InvalidCredentials) as unknown:
        auth.authenticate("nope", "admin123")
    with pytest.raises(InvalidCredentials) as wrong:
        auth.authenticate("admin", "wrong")

    assert type(unknown.value) is type(wrong.value)
    assert str(unknown.value) == str(wrong.value)
    assert unknown.value.detail == wrong.value.detail


def test_username_is_case_sensitive(auth: AuthService) -> None:
    with pytest.raises(InvalidCredentials):
        auth.authenticate("Admin", "admin123")


def test_authenticate_requires_both_fields(auth: AuthService) -> None:
    with pytest.raises(ValueError):
        auth.authenticate("", "admin123")
    with pytest.raises(ValueError):
        auth.authenticate("admin", "")


def test_hardcoded_password_shortcut_is_not_honoured(store: MemoryStore, clock) -> None:
    auth = AuthService(store, secret=SECRET, clock=clock)
    auth.create_admin("admin", "something-else")

    with pytest.raises(InvalidCredentials):
        auth.authenticate("admin", "admin123")


# -----------------------------
# verify_token / authorize
# -----------------------------


def test_issue_then_verify_round_trip(auth: AuthService, clock) -> None:
    _, token = auth.authenticate("admin", "admin123")

    claims = auth.verify_token(token)

    assert (claims.id, claims.username, claims.is_admin) == ("admin1", "admin", True)
    assert claims.issued_at == int(clock.now.timestamp())
    assert claims.expires_at == claims.issued_at + 24 * 3600


def test_token_valid_for_24_hours(auth: AuthService, clock) -> None:
    _, token = auth.authenticate("admin", "admin123")

    clock.advance(hours=23, minutes=59)
    assert auth.verify_token(token).username == "admin"

    clock.advance(minutes=2)
    with pytest.raises(InvalidToken):
        auth.verify_token(token)


def test_token_from_other_secret_rejected(seeded_store: MemoryStore, auth: AuthService, clock) -> None:
    other = AuthService(seeded_store, secret=SECRET + "-other", clock=clock)
    _, token = other.authenticate("admin", "admin123")

    with pytest.raises(InvalidToken):
        auth.verify_token(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c", "eyJhbGciOiJIUzI1NiJ9.e30."])
def test_malformed_token_rejected(auth: AuthService, token: str) -> None:
    with pytest.raises(InvalidToken):
        auth.verify_token(token)


def test_token_missing_identity_rejected(auth: AuthService, clock) -> None:
    now = int(clock.now.timestamp())
    token = jwt.encode({"isAdmin": True, "iat": now, "exp": now + 60}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidToken):
        auth.verify_token(token)


def test_verify_token_does_not_touch_store(auth: AuthService, seeded_store: MemoryStore) -> None:
    _, token = auth.authenticate("admin", "admin123")
    seeded_store._admins.clear()

    assert auth.verify_token(token).username == "admin"


def test_token_without_admin_flag_is_not_authorized(auth: AuthService, clock) -> None:
    now = int(clock.now.timestamp())
    token = jwt.encode(
        {"id": "u1", "username": "someone", "iat": now, "exp": now + 60},
        SECRET,
        algorithm="HS256",
    )

    claims = auth.verify_token(token)

    assert claims.is_admin is False
    assert AuthService.authorize(claims) is False


@pytest.mark.parametrize("flag,expected", [(True, True), (False, False)])
def test_authorize(flag: bool, expected: bool) -> None:
    claims = Claims(id="a", username="a", is_admin=flag, issued_at=0, expires_at=1)
    assert AuthService.authorize(claims) is expected


def test_authorize_none_denied() -> None:
    assert AuthService.authorize(None) is False


def test_token_ttl_is_configurable(store: MemoryStore, clock) -> None:
    auth = AuthService(store, secret=SECRET, token_ttl=timedelta(minutes=5), clock=clock)
    auth.create_admin("ops", "pw-ops-1")
    _, token = auth.authenticate("ops", "pw-ops-1")

    clock.advance(minutes=5)
    with pytest.raises(InvalidToken):
        auth.verify_token(token)


# -----------------------------
# provision_admin
# -----------------------------


def test_provision_admin_with_key(auth: AuthService, seeded_store: MemoryStore) -> None:
    account = auth.provision_admin("ops", "s3cret-pass", PROVISIONING_KEY)

    assert account.id.startswith("admin_")
    assert account.password_hash != "s3cret-pass"
    assert verify_password("s3cret-pass", account.password_hash)
    assert seeded_store.find_admin_by_username("ops") == account

    _, token = auth.authenticate("ops", "s3cret-pass")
    assert auth.verify_token(token).username == "ops"


@pytest.mark.parametrize("key", [None, "", "wrong-key"])
def test_provision_admin_bad_key_forbidden(auth: AuthService, seeded_store: MemoryStore, key) -> None:
    with pytest.raises(Forbidden):
        auth.provision_admin("ops", "s3cret-pass", key)

    assert seeded_store.find_admin_by_username("ops") is None


def test_provision_without_configured_key_is_always_forbidden(store: MemoryStore) -> None:
    auth = AuthService(store, secret=SECRET)

    with pytest.raises(Forbidden):
        auth.provision_admin("ops", "s3cret-pass", "anything")


def test_open_provisioning_needs_no_key(store: MemoryStore) -> None:
    auth = AuthService(store, secret=SECRET, provisioning_open=True)

    account = auth.provision_admin("ops", "s3cret-pass")

    assert store.find_admin_by_username("ops") == account


def test_provision_duplicate_username_does_not_mutate(auth: AuthService, seeded_store: MemoryStore) -> None:
    before = seeded_store.find_admin_by_username("admin")

    with pytest.raises(DuplicateUsername):
        auth.provision_admin("admin", "another-pass", PROVISIONING_KEY)

    assert seeded_store.count_admins() == 1
    assert seeded_store.find_admin_by_username("admin") == before


# -----------------------------
# bootstrap
# -----------------------------


def test_bootstrap_seeds_only_empty_store(store: MemoryStore) -> None:
    auth = AuthService(store, secret=SECRET)

    first = auth.bootstrap_admin_if_needed("admin", "admin123")
    second = auth.bootstrap_admin_if_needed("admin", "admin123")

    assert first is not None and first.username == "admin"
    assert second is None
    assert store.count_admins() == 1


def test_bootstrap_skipped_when_credentials_blank(store: MemoryStore) -> None:
    auth = AuthService(store, secret=SECRET)

    assert auth.bootstrap_admin_if_needed("admin", "") is None
    assert store.count_admins() == 0


def test_blank_secret_rejected(store: MemoryStore) -> None:
    with pytest.raises(ValueError):
        AuthService(store, secret="")
