"""Shared dependencies for routers (service lookup, bearer authentication)."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crm.services.auth_service import AuthService, TokenClaims, TokenInvalidError
from crm.services.errors import ServiceError

bearer = HTTPBearer(auto_error=False)


def app_state(request: Request, name: str):
    value = getattr(getattr(request.app, "state", None), name, None)
    if value is None:
        raise RuntimeError(f"{name} not configured")
    return value


def http_error(err: ServiceError) -> HTTPException:
    return HTTPException(err.status_code, err.message)


def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> TokenClaims:
    if not credentials or not credentials.credentials:
        raise HTTPException(401, "Missing or invalid Authorization header.")
    auth: AuthService = app_state(request, "auth_service")
    try:
        return auth.authenticate(credentials.credentials)
    except TokenInvalidError as exc:
        raise http_error(exc)


def require_roles_access(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[TokenClaims]:
    """Bearer check for /api/roles, switchable with ROLES_REQUIRE_AUTH."""
    settings = app_state(request, "settings")
    if not settings.roles_require_auth:
        return None
    return require_user(request, credentials)
