"""Admin authentication / authorization.

- Admin accounts (username + salted password hash) live in a credential store
- Logins mint HS256 JWTs valid for 24 hours, carrying `isAdmin`
- Privileged routes read `Authorization: Bearer <token>`

There is no server-side revocation; expiry is the only way a token ends.
"""

from .deps import get_current_claims, require_admin
from .service import AuthService

__all__ = [
    "AuthService",
    "get_current_claims",
    "require_admin",
]
