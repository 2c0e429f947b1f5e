"""
Persistence adapters.

Collections (users, properties, roles, settings) are stored as one JSON
document per file. Services depend on the JsonStore interface rather than
touching the files directly.
"""

from crm.repositories.json_store import (
    CollectionNotFoundError,
    CorruptDataError,
    EncodeError,
    JsonStore,
    StoreError,
    StoreIOError,
)

__all__ = [
    "JsonStore",
    "StoreError",
    "CollectionNotFoundError",
    "CorruptDataError",
    "EncodeError",
    "StoreIOError",
]
