"""
Category business logic.
"""

from __future__ import annotations

import asyncpg

from audit import service as audit
from core.errors import ConflictError, NotFoundError

from . import repository, schemas

NOT_FOUND = "Category not found."


async def list_categories() -> list[dict]:
    return await repository.list_categories()


async def create_category(payload: schemas.CategoryRequest) -> dict:
    row = await repository.create_category(payload.name)
    await audit.log_action(f"Category created: {row['name']}")
    return {"message": "Category created.", "category": row}


async def update_category(category_id: int, payload: schemas.CategoryRequest) -> dict:
    row = await repository.update_category(category_id, payload.name)
    if row is None:
        raise NotFoundError(NOT_FOUND)
    await audit.log_action(f"Category updated with ID: {category_id}")
    return {"message": "Category updated.", "category": row}


async def delete_category(category_id: int) -> dict:
    try:
        deleted = await repository.delete_category(category_id)
    except asyncpg.ForeignKeyViolationError as exc:
        raise ConflictError("Cannot delete the category because it has associated resources.") from exc
    if not deleted:
        raise NotFoundError(NOT_FOUND)
    await audit.log_action(f"Category deleted with ID: {category_id}")
    return {"message": "Category deleted."}
