from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from crm.core.config import Settings, get_settings
from crm.core.rate_limiter import RateLimiter
from crm.repositories.json_store import JsonStore, StoreError
from crm.routers import auth as auth_router
from crm.routers import properties as properties_router
from crm.routers import roles as roles_router
from crm.routers import upload as upload_router
from crm.routers import users as users_router
from crm.services.auth_service import AuthService
from crm.services.property_service import PropertyService
from crm.services.role_service import RoleService
from crm.services.upload_service import UPLOAD_KINDS, UploadService

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, no sniffing, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "form")]
    return ".".join(parts) or "body"


def validation_message(errors) -> str:
    missing = [_field_name(e.get("loc", ())) for e in errors if e.get("type") == "missing"]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if not errors:
        return "Invalid request."
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON."
    return f"Invalid value for {_field_name(first.get('loc', ()))}: {first.get('msg', 'invalid')}"


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"message": validation_message(exc.errors())}, status_code=400)

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.exception("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse({"message": "Internal server error."}, status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Factory compatible with uvicorn (``uvicorn --factory crm.app:create_app``)."""
    settings = settings or get_settings()
    app = FastAPI(title="Real Estate CRM API")

    store = JsonStore(settings.data_dir)
    upload_service = UploadService(settings.upload_dir, settings.upload_size_limit_bytes)
    upload_service.ensure_directories()

    app.state.settings = settings
    app.state.store = store
    app.state.rate_limiter = RateLimiter()
    app.state.auth_service = AuthService(store)
    app.state.property_service = PropertyService(store)
    app.state.role_service = RoleService(store)
    app.state.upload_service = upload_service

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    _install_error_handlers(app)

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the CRM API"}

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return "OK"

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(properties_router.router)
    app.include_router(roles_router.router)
    app.include_router(upload_router.router)

    for subdir, _ in UPLOAD_KINDS.values():
        app.mount(f"/{subdir}", StaticFiles(directory=upload_service.upload_dir / subdir), name=subdir)

    return app
