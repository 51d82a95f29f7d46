from __future__ import annotations

import hmac
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

import jwt

from atithi_guardian.config import Config
from atithi_guardian.errors import DuplicateUsername, Forbidden, InvalidCredentials, InvalidToken
from atithi_guardian.models import AdminAccount, Claims
from atithi_guardian.store.base import CredentialStore
from atithi_guardian.util.time import to_iso, utcnow

from .security import create_access_token, decode_access_token, hash_password, verify_password


TOKEN_TTL = timedelta(hours=24)


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


class AuthService:
    """Admin credential checks, token issuance/verification and provisioning.

    Tokens are stateless: verification never touches the store, so a token
    stays valid for its whole window even if the account is later removed.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        secret: str,
        token_ttl: timedelta = TOKEN_TTL,
        provisioning_key: Optional[str] = None,
        provisioning_open: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("jwt_secret_blank")
        self.store = store
        self._secret = secret
        self._ttl = token_ttl
        self._provisioning_key = provisioning_key
        self._provisioning_open = provisioning_open
        self._clock = clock
        self._dummy_hash: Optional[str] = None

    @classmethod
    def from_config(cls, cfg: Config, store: CredentialStore) -> "AuthService":
        return cls(
            store,
            secret=cfg.AUTH_JWT_SECRET,
            token_ttl=timedelta(minutes=max(1, int(cfg.AUTH_TOKEN_EXPIRE_MINUTES))),
            provisioning_key=cfg.ADMIN_PROVISIONING_KEY,
            provisioning_open=cfg.ADMIN_PROVISIONING_OPEN,
        )

    # -----------------------------
    # Login
    # -----------------------------

    def authenticate(self, username: str, password: str) -> Tuple[Dict[str, Any], str]:
        """Return (public admin, token) or raise InvalidCredentials."""
        if not username or not password:
            raise ValueError("missing_fields")

        account = self.store.find_admin_by_username(username)
        if account is None:
            # Same hashing work as a real check so the two failures look alike.
            verify_password(password, self._get_dummy_hash())
            _debug(f"Failed login attempt for username: {username}")
            raise InvalidCredentials()

        if not verify_password(password, account.password_hash):
            _debug(f"Failed login attempt for username: {username}")
            raise InvalidCredentials()

        token = self.issue_token(account)
        _debug(f"Successful login for username: {username}")
        return account.public(), token

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password(uuid.uuid4().hex)
        return self._dummy_hash

    # -----------------------------
    # Tokens
    # -----------------------------

    def issue_token(self, account: AdminAccount) -> str:
        return create_access_token(
            secret=self._secret,
            admin_id=account.id,
            username=account.username,
            is_admin=True,
            issued_at=self._clock(),
            ttl=self._ttl,
        )

    def verify_token(self, token: str) -> Claims:
        try:
            payload = decode_access_token(token=token, secret=self._secret)
        except (jwt.InvalidTokenError, ValueError) as e:
            raise InvalidToken() from e

        try:
            exp = int(payload["exp"])
            iat = int(payload["iat"])
            admin_id = str(payload["id"])
            username = str(payload["username"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidToken() from e

        if exp <= int(self._clock().timestamp()):
            raise InvalidToken("Token expired")

        return Claims(
            id=admin_id,
            username=username,
            is_admin=payload.get("isAdmin") is True,
            issued_at=iat,
            expires_at=exp,
        )

    @staticmethod
    def authorize(claims: Optional[Claims]) -> bool:
        return claims is not None and claims.is_admin is True

    # -----------------------------
    # Provisioning
    # -----------------------------

    def provision_admin(
        self,
        username: str,
        password: str,
        provisioning_key: Optional[str] = None,
    ) -> AdminAccount:
        if not self._provisioning_open:
            expected = self._provisioning_key
            if not expected or not provisioning_key:
                raise Forbidden("Invalid admin registration key")
            if not hmac.compare_digest(provisioning_key.encode("utf-8"), expected.encode("utf-8")):
                raise Forbidden("Invalid admin registration key")

        return self.create_admin(username, password)

    def create_admin(self, username: str, password: str) -> AdminAccount:
        """Insert a new admin without the provisioning key check (CLI / bootstrap)."""
        if not username or not password:
            raise ValueError("missing_fields")
        if self.store.find_admin_by_username(username) is not None:
            raise DuplicateUsername()

        account = AdminAccount(
            id=f"admin_{uuid.uuid4().hex[:12]}",
            username=username,
            password_hash=hash_password(password),
            created_at=to_iso(self._clock()),
        )
        self.store.insert_admin(account)
        _debug(f"Created admin account: username={username}")
        return account

    def bootstrap_admin_if_needed(self, username: str, password: str) -> Optional[AdminAccount]:
        """Create the first admin when the store holds none.

        Returns None when admins already exist or when the bootstrap
        username/password are explicitly blank.
        """
        if self.store.count_admins() > 0:
            return None
        if not username or not password:
            return None
        return self.create_admin(username, password)
