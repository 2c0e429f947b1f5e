"""Media upload use cases (type/extension checks, storage layout)."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path

from crm.services.errors import ServiceError, ValidationError

logger = logging.getLogger(__name__)

# declared type -> (subdirectory / URL prefix, allowed extensions)
UPLOAD_KINDS = {
    "image": ("images", {".jpg", ".jpeg", ".png", ".gif", ".webp"}),
    "video": ("videos", {".mp4", ".webm", ".ogg", ".mov"}),
    "file": ("files", {".pdf", ".doc", ".docx", ".xls", ".xlsx", ".zip", ".glb", ".gltf", ".obj"}),
}

_INVALID_TYPE_MESSAGES = {
    "image": "Invalid image file type",
    "video": "Invalid video file type",
    "file": "Invalid file type",
}


class UploadTooLargeError(ServiceError):
    status_code = 413


@dataclass
class StoredUpload:
    file_url: str
    original_name: str
    mime_type: str
    path: Path


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


class UploadService:
    def __init__(self, upload_dir: Path, size_limit_bytes: int) -> None:
        self.upload_dir = Path(upload_dir)
        self.size_limit_bytes = size_limit_bytes

    def ensure_directories(self) -> None:
        for subdir, _ in UPLOAD_KINDS.values():
            (self.upload_dir / subdir).mkdir(parents=True, exist_ok=True)

    def directory_for(self, kind: str) -> Path:
        return self.upload_dir / UPLOAD_KINDS[kind][0]

    def validate(self, kind: str | None, filename: str | None) -> tuple[str, str]:
        """Return (kind, extension) or raise ValidationError."""
        if not filename:
            raise ValidationError("No file uploaded")
        kind = (kind or "file").strip().lower()
        if kind not in UPLOAD_KINDS:
            raise ValidationError("Invalid upload type. Use image, video or file.")
        ext = file_extension(filename)
        if ext not in UPLOAD_KINDS[kind][1]:
            logger.info("Rejected %s upload with extension %r", kind, ext)
            raise ValidationError(_INVALID_TYPE_MESSAGES[kind])
        return kind, ext

    def check_size(self, size: int) -> None:
        if size > self.size_limit_bytes:
            raise UploadTooLargeError("File exceeds the upload size limit.")

    def store(self, kind: str, ext: str, data: bytes, original_name: str, mime_type: str | None) -> StoredUpload:
        self.check_size(len(data))
        subdir = UPLOAD_KINDS[kind][0]
        new_name = f"{uuid.uuid4()}{ext}"
        target = self.directory_for(kind) / new_name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored %s upload %s (%d bytes)", kind, new_name, len(data))
        return StoredUpload(
            file_url=f"/{subdir}/{new_name}",
            original_name=original_name,
            mime_type=mime_type or "application/octet-stream",
            path=target,
        )
