"""Error taxonomy shared by the stores, the auth service and the HTTP layer.

Each error carries a short machine-readable `detail` code and the HTTP status
the API uses by default. Auth failures are deliberately low-detail.
"""

from __future__ import annotations


class AppError(Exception):
    detail: str = "error"
    status_code: int = 500

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class InvalidCredentials(AppError):
    """Unknown username or wrong password (indistinguishable on purpose)."""

    detail = "Invalid username or password"
    status_code = 401


class InvalidToken(AppError):
    detail = "Invalid token"
    status_code = 401


class Forbidden(AppError):
    detail = "Access denied. Admin privileges required."
    status_code = 403


class DuplicateUsername(AppError):
    detail = "Admin with this username already exists"
    status_code = 409


class StorageFailure(AppError):
    detail = "storage_failure"
    status_code = 500
