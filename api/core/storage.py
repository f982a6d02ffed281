"""
Storage backends for uploaded resource files.

Two implementations share one small contract:
- put(key, data, content_type) -> locator
- read(locator_or_key) -> bytes
- delete(locator_or_key)

A locator is what gets stored in `resources.path`: a filesystem path for the
local backend, a public URL for S3. Both backends accept either a locator or
a bare key wherever one is expected.

Failures are raised as `UpstreamStorageError`. Whether that aborts the
request is the caller's decision (uploads do, cleanup does not).
"""

from __future__ import annotations

import logging
import re
import secrets
import time
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from .config import Settings
from .errors import NotFoundError, UpstreamStorageError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "file"


def build_key(filename: str) -> str:
    """
    Collision-resistant object key: millisecond timestamp + random suffix +
    sanitized original name.
    """
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{sanitize_filename(filename)}"


class StorageBackend(Protocol):
    name: str

    def key_for(self, locator: str) -> str: ...

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str: ...

    async def read(self, locator: str) -> bytes: ...

    async def delete(self, locator: str) -> None: ...


class LocalStorage:
    name = "local"

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).resolve()
        self.directory.mkdir(parents=True, exist_ok=True)

    def key_for(self, locator: str) -> str:
        # Only the basename is honoured so a locator can never escape the directory.
        key = Path(locator or "").name
        if not key:
            raise UpstreamStorageError(f"Invalid storage locator: {locator!r}")
        return key

    def _path(self, locator: str) -> Path:
        return self.directory / self.key_for(locator)

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        target = self._path(key)
        try:
            await run_in_threadpool(target.write_bytes, data)
        except OSError as exc:
            raise UpstreamStorageError(f"Could not write {target}: {exc}") from exc
        return str(target)

    async def read(self, locator: str) -> bytes:
        target = self._path(locator)
        try:
            return await run_in_threadpool(target.read_bytes)
        except FileNotFoundError as exc:
            raise NotFoundError("Stored file not found.") from exc
        except OSError as exc:
            raise UpstreamStorageError(f"Could not read {target}: {exc}") from exc

    async def delete(self, locator: str) -> None:
        target = self._path(locator)
        try:
            await run_in_threadpool(target.unlink)
        except OSError as exc:
            raise UpstreamStorageError(f"Could not delete {target}: {exc}") from exc


class S3Storage:
    name = "s3"

    def __init__(self, *, bucket: str, client: Any, public_base_url: str) -> None:
        self.bucket = bucket
        self.client = client
        self.public_base_url = public_base_url.rstrip("/")

    def locator_for(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def key_for(self, locator: str) -> str:
        raw = (locator or "").strip()
        prefix = self.public_base_url + "/"
        key = raw[len(prefix):] if raw.startswith(prefix) else raw
        if not key:
            raise UpstreamStorageError(f"Invalid storage locator: {locator!r}")
        return key

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        # Single put_object request; uploads are small enough that multipart
        # (resumable) transfers are not worth it.
        try:
            await run_in_threadpool(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or DEFAULT_CONTENT_TYPE,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamStorageError(f"S3 upload failed for {key}: {exc}") from exc
        return self.locator_for(key)

    async def read(self, locator: str) -> bytes:
        key = self.key_for(locator)
        try:
            obj = await run_in_threadpool(self.client.get_object, Bucket=self.bucket, Key=key)
            return await run_in_threadpool(obj["Body"].read)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in {"NoSuchKey", "404"}:
                raise NotFoundError("Stored file not found.") from exc
            raise UpstreamStorageError(f"S3 read failed for {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise UpstreamStorageError(f"S3 read failed for {key}: {exc}") from exc

    async def delete(self, locator: str) -> None:
        key = self.key_for(locator)
        try:
            await run_in_threadpool(self.client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamStorageError(f"S3 delete failed for {key}: {exc}") from exc


def s3_public_base_url(settings: Settings) -> str:
    if settings.s3_public_base_url:
        return settings.s3_public_base_url.rstrip("/")
    if settings.s3_endpoint_url:
        return f"{settings.s3_endpoint_url.rstrip('/')}/{settings.s3_bucket_name}"
    return f"https://{settings.s3_bucket_name}.s3.{settings.aws_region}.amazonaws.com"


def build_storage(settings: Settings) -> StorageBackend:
    if settings.storage_backend == "s3":
        client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        backend: StorageBackend = S3Storage(
            bucket=settings.s3_bucket_name,
            client=client,
            public_base_url=s3_public_base_url(settings),
        )
        logger.info("storage_initialized backend=s3 bucket=%s", settings.s3_bucket_name)
        return backend

    backend = LocalStorage(settings.upload_path)
    logger.info("storage_initialized backend=local directory=%s", settings.upload_path)
    return backend
