from __future__ import annotations

from fastapi import APIRouter, Request

from crm.core.rate_limiter import rate_limit_ip
from crm.domain.models import LoginRequest, PublicUser, RegisterRequest, TokenResponse
from crm.routers.deps import app_state, http_error
from crm.services.auth_service import AuthError, AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_service(request: Request) -> AuthService:
    return app_state(request, "auth_service")


def _rate_limit(request: Request, scope: str) -> None:
    settings = app_state(request, "settings")
    rate_limit_ip(request, scope, limit=settings.auth_rate_limit, window_seconds=60)


@router.post("/register", status_code=201, response_model=PublicUser)
def register(body: RegisterRequest, request: Request):
    _rate_limit(request, "auth:register")
    try:
        return _auth_service(request).register(body.email, body.password, body.role_id)
    except AuthError as exc:
        raise http_error(exc)


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, request: Request):
    _rate_limit(request, "auth:login")
    try:
        token = _auth_service(request).login(body.email, body.password)
    except AuthError as exc:
        raise http_error(exc)
    return {"token": token}
