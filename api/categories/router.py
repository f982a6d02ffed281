"""
Category API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from . import schemas, service

router = APIRouter()


@router.get("/categories")
async def list_categories() -> list[dict]:
    return await service.list_categories()


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(request: schemas.CategoryRequest) -> dict:
    return await service.create_category(request)


@router.put("/categories/{category_id}")
async def update_category(category_id: int, request: schemas.CategoryRequest) -> dict:
    return await service.update_category(category_id, request)


@router.delete("/categories/{category_id}")
async def delete_category(category_id: int) -> dict:
    return await service.delete_category(category_id)
