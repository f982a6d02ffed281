"""
Audit log persistence (raw SQL).
"""

from __future__ import annotations

from core import db


async def insert_log(action: str) -> None:
    await db.execute(
        """
        INSERT INTO logs (action)
        VALUES ($1)
        """,
        action,
    )


async def list_logs() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, action, created_at
        FROM logs
        ORDER BY id DESC
        """
    )
