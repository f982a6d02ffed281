"""
Category persistence (raw SQL).
"""

from __future__ import annotations

from core import db
from core.errors import InternalError


async def list_categories() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, name, created_at
        FROM categories
        ORDER BY name ASC
        """
    )


async def create_category(name: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO categories (name)
        VALUES ($1)
        RETURNING id, name, created_at
        """,
        name,
    )
    if row is None:
        raise InternalError("Failed to create category.")
    return row


async def update_category(category_id: int, name: str) -> dict | None:
    return await db.fetch_one(
        """
        UPDATE categories
        SET name = $2
        WHERE id = $1
        RETURNING id, name, created_at
        """,
        category_id,
        name,
    )


async def delete_category(category_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM categories
        WHERE id = $1
        RETURNING id
        """,
        category_id,
    )
    return row is not None
