"""
Resource API endpoints (multipart uploads).
"""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response

from core.config import Settings
from core.storage import DEFAULT_CONTENT_TYPE, StorageBackend
from core.validation import parse_model

from . import schemas, service
from .dependencies import get_app_settings, get_storage

router = APIRouter()


@router.get("/resources")
async def list_resources() -> list[schemas.ResourceResponse]:
    rows = await service.list_resources()
    return [schemas.ResourceResponse(**row) for row in rows]


@router.get("/resources/{resource_id}")
async def get_resource(resource_id: int) -> schemas.ResourceResponse:
    return schemas.ResourceResponse(**await service.get_resource(resource_id))


@router.get("/resources/{resource_id}/file")
async def download_resource_file(
    resource_id: int,
    storage: StorageBackend = Depends(get_storage),
) -> Response:
    row, data = await service.read_resource_file(storage, resource_id)
    filename = quote(str(row["filename"]))
    return Response(
        content=data,
        media_type=row.get("content_type") or DEFAULT_CONTENT_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )


@router.post("/resources", status_code=status.HTTP_201_CREATED)
async def create_resource(
    file: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    user_id: str | None = Form(default=None),
    category_id: str | None = Form(default=None),
    storage: StorageBackend = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    Upload a file and register it as a resource.

    The file is stored first; the row is only inserted once storage succeeded.
    """
    form = parse_model(
        schemas.CreateResourceForm,
        {"title": title, "user_id": user_id, "category_id": category_id},
    )
    upload = await service.read_upload(file, max_bytes=settings.max_upload_bytes)
    return await service.create_resource(storage, form, upload)


@router.put("/resources/{resource_id}")
async def update_resource(
    resource_id: int,
    file: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    user_id: str | None = Form(default=None),
    category_id: str | None = Form(default=None),
    storage: StorageBackend = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    Update any subset of title, user, category and file.

    A replaced file is removed from storage after the row points at the new one.
    """
    form = parse_model(
        schemas.UpdateResourceForm,
        {"title": title, "user_id": user_id, "category_id": category_id},
    )
    upload = await service.read_upload(file, max_bytes=settings.max_upload_bytes)
    return await service.update_resource(storage, resource_id, form, upload)


@router.delete("/resources/{resource_id}")
async def delete_resource(
    resource_id: int,
    storage: StorageBackend = Depends(get_storage),
) -> dict:
    return await service.delete_resource(storage, resource_id)
