from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from atithi_guardian import __version__
from atithi_guardian.auth import AuthService, require_admin
from atithi_guardian.auth.deps import get_auth_service
from atithi_guardian.config import Config, load_config
from atithi_guardian.errors import DuplicateUsername, Forbidden, InvalidCredentials, StorageFailure
from atithi_guardian.models import Claims
from atithi_guardian.registrations import create_registration
from atithi_guardian.store import CredentialStore, open_store
from atithi_guardian.util.time import utcnow_iso

from .rate_limit import FixedWindowRateLimiter, client_key, parse_limit


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}

# A stay longer than this is a client error, not a registration.
MAX_REGISTRATION_DAYS = 36500


# -----------------------------
# Request bodies
# -----------------------------


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AdminRegisterRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    provisioningKey: Optional[str] = None
    # Older clients send the key as `adminKey`.
    adminKey: Optional[str] = None


class RegistrationRequest(BaseModel):
    name: str = Field(min_length=1)
    idHash: str = Field(min_length=1)
    days: int = Field(gt=0, le=MAX_REGISTRATION_DAYS)
    id: Optional[str] = None
    createdAt: Optional[str] = None
    expiresAt: Optional[str] = None


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    # Location and message only; `input` would echo submitted passwords.
    return [{"loc": [str(p) for p in err.get("loc", ())], "msg": str(err.get("msg", ""))} for err in exc.errors()]


def get_store(request: Request) -> CredentialStore:
    return request.app.state.store


def create_app(cfg: Optional[Config] = None, store: Optional[CredentialStore] = None) -> FastAPI:
    """Build the API around one explicitly constructed credential store."""
    cfg = cfg or load_config()
    store = store if store is not None else open_store(cfg)

    app = FastAPI(title="Atithi Guardian", version=__version__)
    app.state.cfg = cfg
    app.state.store = store
    app.state.auth = AuthService.from_config(cfg, store)

    _cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if _cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=_cors_origins,
            # Browsers reject credentials with a wildcard origin.
            allow_credentials="*" not in _cors_origins,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "Cache-Control"],
            max_age=86400,
        )

    limiters: List[tuple[str, FixedWindowRateLimiter]] = []
    if cfg.RATE_LIMIT_ENABLED:
        limiters = [
            ("/api/admin/", FixedWindowRateLimiter(*parse_limit(cfg.RATE_LIMIT_ADMIN))),
            ("/api/registrations", FixedWindowRateLimiter(*parse_limit(cfg.RATE_LIMIT_REGISTRATIONS))),
        ]

    @app.middleware("http")
    async def _guard(request: Request, call_next):
        path = request.url.path
        for prefix, limiter in limiters:
            if path.startswith(prefix):
                if not limiter.allow(f"{prefix}:{client_key(request)}"):
                    response = JSONResponse({"detail": "rate_limited"}, status_code=429)
                    response.headers.update(_SECURITY_HEADERS)
                    return response
                break

        response = await call_next(request)
        response.headers.update(_SECURITY_HEADERS)
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"detail": "missing_or_invalid_fields", "errors": _field_errors(exc)},
            status_code=400,
        )

    @app.exception_handler(StorageFailure)
    async def _storage_failure(request: Request, exc: StorageFailure) -> JSONResponse:
        _debug(f"Storage failure on {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse({"detail": "Internal server error"}, status_code=500)

    @app.on_event("startup")
    def _on_startup() -> None:
        store.init()

        # Seed the first admin when the store has none.
        boot = app.state.auth.bootstrap_admin_if_needed(
            cfg.AUTH_BOOTSTRAP_ADMIN_USERNAME,
            cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD,
        )
        if boot:
            _debug(f"Bootstrapped initial admin user: username={boot.username}")
        _debug(f"Started ({cfg.APP_ENV}) with {store.name} store")

    # -----------------------------
    # Health
    # -----------------------------

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "environment": cfg.APP_ENV,
            "timestamp": utcnow_iso(),
            "store": store.name,
        }

    # -----------------------------
    # Admin auth
    # -----------------------------

    @app.post("/api/admin/login")
    def admin_login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> Dict[str, Any]:
        _debug(f"Login attempt for username: {payload.username}")
        if auth.store.count_admins() == 0:
            _debug("No admin accounts found")
            raise HTTPException(status_code=500, detail="No admin accounts configured")

        try:
            admin, token = auth.authenticate(payload.username, payload.password)
        except InvalidCredentials as e:
            raise HTTPException(status_code=401, detail=e.detail)

        return {"admin": admin, "token": token}

    @app.post("/api/admin/register", status_code=201)
    def admin_register(
        payload: AdminRegisterRequest,
        auth: AuthService = Depends(get_auth_service),
    ) -> Dict[str, Any]:
        key = payload.provisioningKey or payload.adminKey
        try:
            account = auth.provision_admin(payload.username, payload.password, key)
        except Forbidden as e:
            raise HTTPException(status_code=401, detail=e.detail)
        except DuplicateUsername as e:
            raise HTTPException(status_code=400, detail=e.detail)

        return {"success": True, "admin": account.public()}

    # -----------------------------
    # Admin: registrations
    # -----------------------------

    @app.get("/api/admin/registrations")
    def admin_list_registrations(
        _admin: Claims = Depends(require_admin),
        s: CredentialStore = Depends(get_store),
    ) -> List[Dict[str, Any]]:
        return [r.to_document() for r in s.list_registrations()]

    @app.delete("/api/admin/registrations")
    def admin_clear_registrations(
        admin: Claims = Depends(require_admin),
        s: CredentialStore = Depends(get_store),
    ) -> Dict[str, Any]:
        n = s.delete_all_registrations()
        _debug(f"All registrations cleared by {admin.username} ({n} removed)")
        return {"success": True, "deleted": n}

    @app.delete("/api/admin/registrations/{registration_id}")
    def admin_delete_registration(
        registration_id: str,
        admin: Claims = Depends(require_admin),
        s: CredentialStore = Depends(get_store),
    ) -> Dict[str, Any]:
        if not s.delete_registration(registration_id):
            raise HTTPException(status_code=404, detail="Registration not found")
        _debug(f"Registration {registration_id} deleted by {admin.username}")
        return {"success": True, "id": registration_id}

    # -----------------------------
    # Public: registrations
    # -----------------------------

    @app.get("/api/registrations")
    def find_registrations(
        id_hash: Optional[str] = Query(default=None, alias="idHash"),
        s: CredentialStore = Depends(get_store),
    ) -> List[Dict[str, Any]]:
        # Without a hash nothing is listed; the full list is admin-only.
        if not id_hash:
            return []
        return [r.to_document() for r in s.find_registrations_by_id_hash(id_hash)]

    @app.get("/api/registrations/{registration_id}")
    def get_registration(registration_id: str, s: CredentialStore = Depends(get_store)) -> Dict[str, Any]:
        r = s.get_registration(registration_id)
        if r is None:
            raise HTTPException(status_code=404, detail="Registration not found")
        return r.to_document()

    @app.post("/api/registrations", status_code=201)
    def add_registration(payload: RegistrationRequest, s: CredentialStore = Depends(get_store)) -> Dict[str, Any]:
        try:
            record = create_registration(
                s,
                name=payload.name,
                id_hash=payload.idHash,
                days=payload.days,
                registration_id=payload.id,
                created_at=payload.createdAt,
                expires_at=payload.expiresAt,
            )
        except ValueError as e:
            detail = str(e)
            if detail == "registration_exists":
                raise HTTPException(status_code=409, detail=detail)
            raise HTTPException(status_code=400, detail=detail)
        return record.to_document()

    return app


app = create_app()
