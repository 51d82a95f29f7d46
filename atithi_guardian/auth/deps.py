from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from atithi_guardian.errors import InvalidToken
from atithi_guardian.models import Claims

from .service import AuthService


_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def get_auth_service(request: Request) -> AuthService:
    auth = getattr(request.app.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=500, detail="server_config_missing")
    return auth


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    auth: AuthService = Depends(get_auth_service),
) -> Claims:
    """Decode the `Authorization: Bearer <jwt>` header.

    No store lookup happens here; the token alone identifies the caller.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access denied. No token provided.")

    try:
        return auth.verify_token(credentials.credentials)
    except InvalidToken as e:
        raise _unauthorized(e.detail)


def require_admin(claims: Claims = Depends(get_current_claims)) -> Claims:
    if not AuthService.authorize(claims):
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return claims
