from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Make the crm package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from crm.app import create_app  # noqa: E402
from crm.core import config as core_config  # noqa: E402

JWT_SECRET = "test-secret-with-enough-length-for-hs256!"


def write_collection(data_dir: Path, name: str, value) -> None:
    (data_dir / f"{name}.json").write_text(json.dumps(value, indent=2), encoding="utf-8")


def read_collection(data_dir: Path, name: str):
    return json.loads((data_dir / f"{name}.json").read_text(encoding="utf-8"))


@pytest.fixture()
def data_dir(tmp_path):
    """Seeded data directory with the four collections."""
    root = tmp_path / "data"
    root.mkdir()
    write_collection(root, "settings", {"jwtSecret": JWT_SECRET, "tokenExpiry": "1h"})
    write_collection(root, "users", [])
    write_collection(root, "properties", [])
    write_collection(root, "roles", [])
    return root


@pytest.fixture()
def app_env(data_dir, monkeypatch):
    """Point the settings at the temporary data directory and reset the settings cache."""
    monkeypatch.setenv("DATA_DIR", str(data_dir))
    monkeypatch.setenv("UPLOAD_DIR", str(data_dir / "upload"))
    monkeypatch.setenv("AUTH_RATE_LIMIT", "1000")
    monkeypatch.delenv("ROLES_REQUIRE_AUTH", raising=False)
    monkeypatch.delenv("UPLOAD_SIZE_LIMIT_BYTES", raising=False)
    core_config.get_settings.cache_clear()
    yield data_dir
    core_config.get_settings.cache_clear()


@pytest.fixture()
def client(app_env):
    return TestClient(create_app())


@pytest.fixture()
def auth_headers(client):
    resp = client.post("/auth/register", json={"email": "agent@example.com", "password": "pw-123456", "roleId": "r1"})
    assert resp.status_code == 201
    resp = client.post("/auth/login", json={"email": "agent@example.com", "password": "pw-123456"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}
