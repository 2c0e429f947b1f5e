#!/usr/bin/env python3
"""
Prepare a data directory for the CRM API.

Creates settings.json (random JWT secret), users.json, properties.json and
roles.json when missing, and optionally registers a first user.

Usage:
  python scripts/seed_data.py [--data-dir data] [--email admin@example.com --password s3cret [--role admin]]
"""
from __future__ import annotations

import argparse
import secrets
import sys
import uuid
from pathlib import Path

from crm.core.config import get_settings
from crm.repositories.json_store import JsonStore
from crm.services.auth_service import AuthError, AuthService

DEFAULT_ROLES = [
    {"name": "admin", "permissions": ["properties:write", "roles:write", "users:write", "upload"]},
    {"name": "agent", "permissions": ["properties:write", "upload"]},
]


def seed(store: JsonStore, *, force: bool = False, token_expiry: str = "1h") -> list[str]:
    """Create the collections; returns the names that were written."""
    store.root.mkdir(parents=True, exist_ok=True)
    defaults = {
        "settings": {"jwtSecret": secrets.token_urlsafe(48), "tokenExpiry": token_expiry},
        "users": [],
        "properties": [],
        "roles": [{"id": str(uuid.uuid4()), **role} for role in DEFAULT_ROLES],
    }
    written = []
    for name, value in defaults.items():
        if force:
            store.save(name, value)
            written.append(name)
        elif store.ensure(name, value):
            written.append(name)
    return written


def _role_id(store: JsonStore, role: str) -> str:
    for entry in store.load_list("roles"):
        if isinstance(entry, dict) and role in (entry.get("id"), entry.get("name")):
            return entry["id"]
    raise SystemExit(f"Role '{role}' does not exist")


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed the CRM data directory")
    ap.add_argument("--data-dir", help="Data directory (default: DATA_DIR or ./data)")
    ap.add_argument("--force", action="store_true", help="Overwrite existing collections")
    ap.add_argument("--token-expiry", default="1h", help="Token lifetime written to settings.json")
    ap.add_argument("--email", help="Create a first user with this email")
    ap.add_argument("--password", help="Password for --email")
    ap.add_argument("--role", default="admin", help="Role name or id for --email (default: admin)")
    args = ap.parse_args()

    root = Path(args.data_dir).resolve() if args.data_dir else get_settings().data_dir
    store = JsonStore(root)
    written = seed(store, force=args.force, token_expiry=args.token_expiry)
    print(f"OK: data directory {root}")
    for name in written:
        print(f"  wrote {name}.json")

    if args.email:
        if not args.password:
            raise SystemExit("--password is required with --email")
        try:
            user = AuthService(store).register(args.email, args.password, _role_id(store, args.role))
        except AuthError as exc:
            raise SystemExit(exc.message)
        print(f"  user {user['email']} ({user['id']})")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
