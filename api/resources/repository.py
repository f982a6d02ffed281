"""
Resource persistence (raw SQL).
"""

from __future__ import annotations

from dataclasses import dataclass

from core import db
from core.errors import InternalError

_COLUMNS = "id, title, filename, path, content_type, size_bytes, user_id, category_id, upload_date"


@dataclass(frozen=True)
class ResourceChanges:
    """
    Partial update of a resource row. A None field keeps the stored value.
    """

    title: str | None = None
    filename: str | None = None
    path: str | None = None
    content_type: str | None = None
    size_bytes: int | None = None
    user_id: int | None = None
    category_id: int | None = None


async def list_resources() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT
          r.id, r.title, r.filename, r.path, r.content_type, r.size_bytes,
          r.upload_date, r.user_id, u.username,
          r.category_id, c.name AS category_name
        FROM resources r
        JOIN users u ON r.user_id = u.id
        JOIN categories c ON r.category_id = c.id
        ORDER BY r.upload_date DESC, r.id DESC
        """
    )


async def get_resource(resource_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM resources
        WHERE id = $1
        """,
        resource_id,
    )


async def create_resource(
    *,
    title: str | None,
    filename: str,
    path: str,
    content_type: str | None,
    size_bytes: int,
    user_id: int,
    category_id: int,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO resources (title, filename, path, content_type, size_bytes, user_id, category_id)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING {_COLUMNS}
        """,
        title,
        filename,
        path,
        content_type,
        size_bytes,
        user_id,
        category_id,
    )
    if row is None:
        raise InternalError("Failed to create resource.")
    return row


async def update_resource(resource_id: int, changes: ResourceChanges) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE resources
        SET title = COALESCE($2, title),
            filename = COALESCE($3, filename),
            path = COALESCE($4, path),
            content_type = COALESCE($5, content_type),
            size_bytes = COALESCE($6, size_bytes),
            user_id = COALESCE($7, user_id),
            category_id = COALESCE($8, category_id)
        WHERE id = $1
        RETURNING {_COLUMNS}
        """,
        resource_id,
        changes.title,
        changes.filename,
        changes.path,
        changes.content_type,
        changes.size_bytes,
        changes.user_id,
        changes.category_id,
    )


async def delete_resource(resource_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM resources
        WHERE id = $1
        RETURNING id
        """,
        resource_id,
    )
    return row is not None
