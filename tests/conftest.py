from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from atithi_guardian.api.server import create_app
from atithi_guardian.auth import AuthService
from atithi_guardian.auth.security import hash_password
from atithi_guardian.config import Config
from atithi_guardian.models import AdminAccount
from atithi_guardian.store import FileStore, MemoryStore, SqlStore


SECRET = "test-secret-0123456789abcdef0123456789abcdef"
PROVISIONING_KEY = "test-provisioning-key"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def seeded_store(store: MemoryStore) -> MemoryStore:
    store.insert_admin(
        AdminAccount(id="admin1", username="admin", password_hash=hash_password("admin123"))
    )
    return store


@pytest.fixture()
def auth(seeded_store: MemoryStore, clock: FakeClock) -> AuthService:
    return AuthService(seeded_store, secret=SECRET, provisioning_key=PROVISIONING_KEY, clock=clock)


@pytest.fixture(params=["memory", "file", "sqlite"])
def any_store(request, tmp_path):
    if request.param == "memory":
        s = MemoryStore()
    elif request.param == "file":
        s = FileStore(tmp_path / "data.json")
    else:
        s = SqlStore(str(tmp_path / "atithi.sqlite"))
    s.init()
    return s


@pytest.fixture()
def cfg() -> Config:
    return replace(
        Config(),
        APP_ENV="test",
        STORE_BACKEND="memory",
        AUTH_JWT_SECRET=SECRET,
        AUTH_TOKEN_EXPIRE_MINUTES=1440,
        ADMIN_PROVISIONING_KEY=PROVISIONING_KEY,
        ADMIN_PROVISIONING_OPEN=False,
        AUTH_BOOTSTRAP_ADMIN_USERNAME="admin",
        AUTH_BOOTSTRAP_ADMIN_PASSWORD="admin123",
        CORS_ALLOW_ORIGINS="*",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture()
def client(cfg: Config):
    app = create_app(cfg, MemoryStore())
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def admin_headers(client: TestClient) -> dict:
    r = client.post("/api/admin/login", json={"username": "admin", "password": "admin123"})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['token']}"}
