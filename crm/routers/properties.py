from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from crm.domain.models import PropertyCreate, PropertyUpdate
from crm.routers.deps import app_state, http_error, require_user
from crm.services.errors import ServiceError
from crm.services.property_service import PropertyService

router = APIRouter(prefix="/api/properties", tags=["properties"])


def _properties(request: Request) -> PropertyService:
    return app_state(request, "property_service")


# Public routes
@router.get("")
def list_properties(
    request: Request,
    status: Optional[str] = None,
    agent_id: Optional[str] = Query(None, alias="agentId"),
    q: Optional[str] = None,
):
    return _properties(request).search(status=status, agent_id=agent_id, q=q)


@router.get("/stats")
def property_stats(request: Request):
    return _properties(request).stats()


@router.get("/{property_id}")
def get_property(property_id: str, request: Request):
    try:
        return _properties(request).get(property_id)
    except ServiceError as exc:
        raise http_error(exc)


# Protected routes
@router.post("", status_code=201, dependencies=[Depends(require_user)])
def create_property(body: PropertyCreate, request: Request):
    return _properties(request).create(body)


@router.put("/{property_id}", dependencies=[Depends(require_user)])
def update_property(property_id: str, body: PropertyUpdate, request: Request):
    try:
        return _properties(request).update(property_id, body)
    except ServiceError as exc:
        raise http_error(exc)


@router.delete("/{property_id}", status_code=204, dependencies=[Depends(require_user)])
def delete_property(property_id: str, request: Request):
    try:
        _properties(request).delete(property_id)
    except ServiceError as exc:
        raise http_error(exc)
    return Response(status_code=204)
