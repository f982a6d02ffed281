"""
User persistence (raw SQL).

The password hash is only ever selected by `get_user_by_id`; list queries
leave it out.
"""

from __future__ import annotations

from core import db
from core.errors import InternalError


async def list_users() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, username, email, created_at
        FROM users
        ORDER BY username ASC
        """
    )


async def get_user_by_id(user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, email, password, created_at
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def create_user(*, username: str, email: str, password_hash: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (username, email, password)
        VALUES ($1, $2, $3)
        RETURNING id, username, email, created_at
        """,
        username,
        email,
        password_hash,
    )
    if row is None:
        raise InternalError("Failed to create user.")
    return row


async def update_user(
    user_id: int,
    *,
    username: str | None = None,
    email: str | None = None,
    password_hash: str | None = None,
) -> dict | None:
    """
    Coalesce update: a None argument keeps the stored value.
    """
    return await db.fetch_one(
        """
        UPDATE users
        SET username = COALESCE($2, username),
            email = COALESCE($3, email),
            password = COALESCE($4, password)
        WHERE id = $1
        RETURNING id, username, email, created_at
        """,
        user_id,
        username,
        email,
        password_hash,
    )


async def delete_user(user_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM users
        WHERE id = $1
        RETURNING id
        """,
        user_id,
    )
    return row is not None
