"""
Configuration helpers for the CRM backend.

Exposes a Settings object read from environment variables so that routers,
services and scripts do not fetch os.environ directly. The JWT secret and token
TTL are not here: they live in the ``settings`` collection on disk.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_UPLOAD_SIZE_LIMIT = 10 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    port: int
    cors_origins: tuple[str, ...]
    upload_size_limit_bytes: int
    data_dir: Path
    upload_dir: Path
    roles_require_auth: bool
    auth_rate_limit: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    data_dir = Path(os.getenv("DATA_DIR") or "data").resolve()
    upload_dir = Path(os.getenv("UPLOAD_DIR") or data_dir / "upload").resolve()
    origins = os.getenv("CORS_ORIGIN", "http://localhost:3000")
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        port=_int(os.getenv("PORT", "4000"), 4000),
        cors_origins=tuple(o.strip().rstrip("/") for o in origins.split(",") if o.strip()),
        upload_size_limit_bytes=_int(
            os.getenv("UPLOAD_SIZE_LIMIT_BYTES", str(DEFAULT_UPLOAD_SIZE_LIMIT)), DEFAULT_UPLOAD_SIZE_LIMIT
        ),
        data_dir=data_dir,
        upload_dir=upload_dir,
        roles_require_auth=_bool(os.getenv("ROLES_REQUIRE_AUTH"), True),
        auth_rate_limit=_int(os.getenv("AUTH_RATE_LIMIT", "20"), 20),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
