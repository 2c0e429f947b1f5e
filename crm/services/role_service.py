"""Role management use cases."""

from __future__ import annotations

import logging
import uuid

from crm.domain.models import Role, RoleCreate, RoleUpdate, to_record
from crm.repositories.json_store import JsonStore
from crm.services.errors import NotFoundError

logger = logging.getLogger(__name__)

ROLES = "roles"


class RoleService:
    """CRUD over the roles collection. Users referencing a deleted role are left as is."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store

    def all(self) -> list:
        return self.store.load_list(ROLES)

    def create(self, payload: RoleCreate) -> dict:
        record = to_record(Role(id=str(uuid.uuid4()), **payload.model_dump()))
        self.store.update_list(ROLES, lambda roles: roles.append(record))
        logger.info("Created role %s (%s)", record["id"], record["name"])
        return record

    def update(self, role_id: str, payload: RoleUpdate) -> dict:
        changes = payload.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude_none=True)

        def _merge(roles: list) -> dict:
            for role in roles:
                if isinstance(role, dict) and role.get("id") == role_id:
                    role.update(changes)
                    return role
            raise NotFoundError("Role not found.")

        return self.store.update_list(ROLES, _merge)

    def delete(self, role_id: str) -> None:
        def _remove(roles: list) -> None:
            remaining = [r for r in roles if not (isinstance(r, dict) and r.get("id") == role_id)]
            if len(remaining) == len(roles):
                raise NotFoundError("Role not found.")
            roles[:] = remaining

        self.store.update_list(ROLES, _remove)
        logger.info("Deleted role %s", role_id)
