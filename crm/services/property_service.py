"""Property listing use cases (list/filter, CRUD, dashboard counters)."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from crm.domain.models import Property, PropertyCreate, PropertyUpdate, to_record
from crm.repositories.json_store import JsonStore
from crm.services.errors import NotFoundError

logger = logging.getLogger(__name__)

PROPERTIES = "properties"
_REQUIRED_FIELDS = ("title", "price", "status")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _matches(prop: dict, status: Optional[str], agent_id: Optional[str], query: str) -> bool:
    if status and prop.get("status") != status:
        return False
    if agent_id and prop.get("agentId") != agent_id:
        return False
    if query:
        haystack = f"{prop.get('title') or ''}\n{prop.get('description') or ''}".lower()
        if query not in haystack:
            return False
    return True


class PropertyService:
    def __init__(self, store: JsonStore) -> None:
        self.store = store

    def _records(self) -> list:
        return [p for p in self.store.load_list(PROPERTIES) if isinstance(p, dict)]

    def search(self, status: str | None = None, agent_id: str | None = None, q: str | None = None) -> list:
        query = (q or "").strip().lower()
        return [p for p in self._records() if _matches(p, status, agent_id, query)]

    def get(self, property_id: str) -> dict:
        for prop in self._records():
            if prop.get("id") == property_id:
                return prop
        raise NotFoundError("Property not found.")

    def stats(self) -> dict:
        records = self._records()
        by_status = Counter(str(p.get("status") or "") for p in records)
        return {"total": len(records), "byStatus": dict(by_status)}

    def create(self, payload: PropertyCreate) -> dict:
        entity = Property(id=str(uuid.uuid4()), created_at=_now_iso(), **payload.model_dump())
        record = to_record(entity)

        def _insert(props: list) -> None:
            props.append(record)

        self.store.update_list(PROPERTIES, _insert)
        logger.info("Created property %s", record["id"])
        return record

    def update(self, property_id: str, payload: PropertyUpdate) -> dict:
        changes = payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
        # required fields cannot be cleared
        for key in _REQUIRED_FIELDS:
            if changes.get(key, "") is None:
                del changes[key]

        def _merge(props: list) -> dict:
            for prop in props:
                if isinstance(prop, dict) and prop.get("id") == property_id:
                    prop.update(changes)
                    prop["updatedAt"] = _now_iso()
                    return prop
            raise NotFoundError("Property not found.")

        return self.store.update_list(PROPERTIES, _merge)

    def delete(self, property_id: str) -> None:
        def _remove(props: list) -> None:
            remaining = [p for p in props if not (isinstance(p, dict) and p.get("id") == property_id)]
            if len(remaining) == len(props):
                raise NotFoundError("Property not found.")
            props[:] = remaining

        self.store.update_list(PROPERTIES, _remove)
        logger.info("Deleted property %s", property_id)
