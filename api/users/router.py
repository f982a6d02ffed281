"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from . import schemas, service

router = APIRouter()


@router.get("/users")
async def list_users() -> list[schemas.UserResponse]:
    return await service.list_users()


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(request: schemas.CreateUserRequest) -> dict:
    return await service.create_user(request)


@router.put("/users/{user_id}")
async def update_user(user_id: int, request: schemas.UpdateUserRequest) -> dict:
    return await service.update_user(user_id, request)


@router.delete("/users/{user_id}")
async def delete_user(user_id: int) -> dict:
    return await service.delete_user(user_id)
