from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from crm.domain.models import RoleCreate, RoleUpdate
from crm.routers.deps import app_state, http_error, require_roles_access
from crm.services.errors import ServiceError
from crm.services.role_service import RoleService

router = APIRouter(prefix="/api/roles", tags=["roles"], dependencies=[Depends(require_roles_access)])


def _roles(request: Request) -> RoleService:
    return app_state(request, "role_service")


@router.get("")
def list_roles(request: Request):
    return _roles(request).all()


@router.post("", status_code=201)
def create_role(body: RoleCreate, request: Request):
    return _roles(request).create(body)


@router.put("/{role_id}")
def update_role(role_id: str, body: RoleUpdate, request: Request):
    try:
        return _roles(request).update(role_id, body)
    except ServiceError as exc:
        raise http_error(exc)


@router.delete("/{role_id}", status_code=204)
def delete_role(role_id: str, request: Request):
    try:
        _roles(request).delete(role_id)
    except ServiceError as exc:
        raise http_error(exc)
    return Response(status_code=204)
