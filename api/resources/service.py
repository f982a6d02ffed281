"""
Resource lifecycle.

Each write keeps a `resources` row and its stored file roughly in sync:

    validate -> read old row -> upload -> persist -> clean up old file -> audit

There is no transaction spanning storage and the database. An upload failure
aborts before anything is persisted; a failed cleanup of an old or orphaned
file is only logged. Two concurrent updates of the same resource can both
upload, and the losing upload is left behind in storage.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

import asyncpg
from fastapi import UploadFile

from audit import service as audit
from core import storage as storage_backends
from core.errors import ClientInputError, ConflictError, NotFoundError, PayloadTooLargeError, UpstreamStorageError
from core.storage import StorageBackend

from . import repository, schemas
from .repository import ResourceChanges

logger = logging.getLogger(__name__)

NOT_FOUND = "Resource not found."
NO_FILE = "No file uploaded."
NOTHING_TO_UPDATE = "Provide at least one field to update."
MISSING_REFERENCE = "The specified user or category does not exist."
UPLOAD_FAILED = "Could not store the uploaded file."

READ_CHUNK_BYTES = 1024 * 1024  # 1 MiB


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content_type: str | None
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


async def read_upload(file: UploadFile | None, *, max_bytes: int) -> UploadedFile | None:
    """
    Buffer an upload in memory, enforcing `max_bytes`.

    Returns None when the request carried no file part.
    """
    if file is None or not file.filename:
        return None

    buf = bytearray()
    while True:
        chunk = await file.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise PayloadTooLargeError(f"File too large. Max is {max_bytes} bytes.")

    return UploadedFile(filename=file.filename, content_type=file.content_type, data=bytes(buf))


async def _store(storage: StorageBackend, upload: UploadedFile) -> str:
    key = storage_backends.build_key(upload.filename)
    try:
        locator = await storage.put(key, upload.data, upload.content_type)
    except UpstreamStorageError as exc:
        logger.exception("upload_failed backend=%s key=%s", storage.name, key)
        raise UpstreamStorageError(UPLOAD_FAILED) from exc
    logger.info("upload_stored backend=%s key=%s size=%s", storage.name, key, upload.size_bytes)
    return locator


async def _discard(storage: StorageBackend, locator: str | None, *, reason: str) -> None:
    """
    Best-effort delete of a stored file. Never raises.
    """
    if not locator:
        return
    try:
        await storage.delete(locator)
    except Exception as exc:
        logger.warning("storage_cleanup_failed reason=%s locator=%s error=%s", reason, locator, exc)
        return
    logger.info("storage_cleanup_done reason=%s locator=%s", reason, locator)


async def list_resources() -> list[dict]:
    return await repository.list_resources()


async def get_resource(resource_id: int) -> dict:
    row = await repository.get_resource(resource_id)
    if row is None:
        raise NotFoundError(NOT_FOUND)
    return row


async def create_resource(
    storage: StorageBackend,
    form: schemas.CreateResourceForm,
    upload: UploadedFile | None,
) -> dict:
    if upload is None:
        raise ClientInputError(NO_FILE)

    locator = await _store(storage, upload)
    try:
        row = await repository.create_resource(
            title=form.title or upload.filename,
            filename=upload.filename,
            path=locator,
            content_type=upload.content_type,
            size_bytes=upload.size_bytes,
            user_id=form.user_id,
            category_id=form.category_id,
        )
    except asyncpg.ForeignKeyViolationError as exc:
        await _discard(storage, locator, reason="create_rejected")
        raise ConflictError(MISSING_REFERENCE) from exc
    except Exception:
        await _discard(storage, locator, reason="create_failed")
        raise

    await audit.log_action(f"Resource created with ID: {row['id']}")
    return {"message": "Resource created.", "resource": row}


async def update_resource(
    storage: StorageBackend,
    resource_id: int,
    form: schemas.UpdateResourceForm,
    upload: UploadedFile | None,
) -> dict:
    if form.is_empty() and upload is None:
        raise ClientInputError(NOTHING_TO_UPDATE)

    # Read first so an unknown id never causes a storage write.
    existing = await get_resource(resource_id)
    old_locator = existing.get("path")

    new_locator = await _store(storage, upload) if upload is not None else None
    changes = ResourceChanges(
        title=form.title,
        user_id=form.user_id,
        category_id=form.category_id,
    )
    if upload is not None:
        changes = replace(
            changes,
            filename=upload.filename,
            path=new_locator,
            content_type=upload.content_type,
            size_bytes=upload.size_bytes,
        )

    try:
        row = await repository.update_resource(resource_id, changes)
    except asyncpg.ForeignKeyViolationError as exc:
        await _discard(storage, new_locator, reason="update_rejected")
        raise ConflictError(MISSING_REFERENCE) from exc
    except Exception:
        await _discard(storage, new_locator, reason="update_failed")
        raise

    if row is None:
        # Deleted by another request between the read and the update.
        await _discard(storage, new_locator, reason="update_target_gone")
        raise NotFoundError(NOT_FOUND)

    if new_locator is not None and old_locator and old_locator != new_locator:
        await _discard(storage, old_locator, reason="replaced")

    await audit.log_action(f"Resource updated with ID: {resource_id}")
    return {"message": "Resource updated.", "resource": row}


async def delete_resource(storage: StorageBackend, resource_id: int) -> dict:
    existing = await get_resource(resource_id)

    # Row first: the locator must stay valid for as long as the row exists.
    deleted = await repository.delete_resource(resource_id)
    if not deleted:
        raise NotFoundError(NOT_FOUND)

    await _discard(storage, existing.get("path"), reason="deleted")
    await audit.log_action(f"Resource deleted with ID: {resource_id}")
    return {"message": "Resource deleted."}


async def read_resource_file(storage: StorageBackend, resource_id: int) -> tuple[dict, bytes]:
    row = await get_resource(resource_id)
    data = await storage.read(str(row["path"]))
    return row, data
