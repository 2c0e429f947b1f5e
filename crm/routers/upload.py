from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from crm.routers.deps import app_state, http_error, require_user
from crm.services.errors import ServiceError
from crm.services.upload_service import UploadService

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("", status_code=201, dependencies=[Depends(require_user)])
async def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None),
    kind: Optional[str] = Form(None, alias="type"),
):
    service: UploadService = app_state(request, "upload_service")
    try:
        upload_kind, ext = service.validate(kind, file.filename if file else None)
        # one byte past the limit is enough to detect an oversized body
        data = await file.read(service.size_limit_bytes + 1)
        stored = await run_in_threadpool(
            service.store, upload_kind, ext, data, file.filename, file.content_type
        )
    except ServiceError as exc:
        raise http_error(exc)
    finally:
        if file is not None:
            await file.close()
    return {
        "message": "File uploaded successfully",
        "fileUrl": stored.file_url,
        "originalName": stored.original_name,
        "mimeType": stored.mime_type,
    }
