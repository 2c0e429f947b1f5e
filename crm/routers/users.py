from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from crm.domain.models import ProfileUpdate, PublicUser
from crm.routers.deps import app_state, http_error, require_user
from crm.services.auth_service import AuthService, TokenClaims
from crm.services.errors import ServiceError

router = APIRouter(prefix="/api/users", tags=["users"])


def _auth_service(request: Request) -> AuthService:
    return app_state(request, "auth_service")


@router.get("/me", response_model=PublicUser)
def read_me(request: Request, claims: TokenClaims = Depends(require_user)):
    try:
        return _auth_service(request).get_profile(claims.user_id)
    except ServiceError as exc:
        raise http_error(exc)


@router.put("/me", response_model=PublicUser)
def update_me(body: ProfileUpdate, request: Request, claims: TokenClaims = Depends(require_user)):
    try:
        return _auth_service(request).update_profile(claims.user_id, email=body.email, password=body.password)
    except ServiceError as exc:
        raise http_error(exc)
