import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load a local .env file if present (no-op otherwise).
load_dotenv()


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Core
    # -----------------
    APP_ENV: str = os.environ.get("APP_ENV", "development")

    # Which credential store backs the API: file | memory | sql
    STORE_BACKEND: str = os.environ.get("STORE_BACKEND", "file").strip().lower()

    # File-backed store: a single JSON document with `registrations` and `admins`.
    DATA_FILE_PATH: str = os.environ.get("DATA_FILE_PATH", "./data.json")

    # Relational store. Postgres when the DSN is a postgres:// URL, SQLite otherwise.
    DB_DSN: str = (
        os.environ.get("ATITHI_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("ATITHI_DB_PATH", "./atithi_guardian.sqlite")
    )

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set AUTH_JWT_SECRET to a strong random value.
    AUTH_JWT_SECRET: str = os.environ.get("AUTH_JWT_SECRET", "dev_change_me")
    AUTH_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("AUTH_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours

    # Admin provisioning (POST /api/admin/register).
    # Without a key and without ADMIN_PROVISIONING_OPEN=1 provisioning is refused.
    ADMIN_PROVISIONING_KEY: str | None = (os.environ.get("ADMIN_PROVISIONING_KEY") or "").strip() or None
    ADMIN_PROVISIONING_OPEN: bool = _env_bool("ADMIN_PROVISIONING_OPEN", False) is True

    # Bootstrap first admin if the store holds no admins
    AUTH_BOOTSTRAP_ADMIN_USERNAME: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_USERNAME", "admin")
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "admin123")

    # -----------------
    # HTTP
    # -----------------
    CORS_ALLOW_ORIGINS: str = os.environ.get("CORS_ALLOW_ORIGINS", "*")

    # Fixed-window request limits, "<max requests>/<window seconds>".
    RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", True) is True
    RATE_LIMIT_ADMIN: str = os.environ.get("RATE_LIMIT_ADMIN", "20/900")
    RATE_LIMIT_REGISTRATIONS: str = os.environ.get("RATE_LIMIT_REGISTRATIONS", "30/60")


def load_config() -> Config:
    return Config()
