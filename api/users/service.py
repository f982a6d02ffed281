"""
User business logic.
"""

from __future__ import annotations

import asyncpg

from audit import service as audit
from core.errors import ConflictError, NotFoundError

from . import repository, schemas, security

NOT_FOUND = "User not found."
USERNAME_TAKEN = "Username is already in use."


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        username=str(user_row["username"]),
        email=str(user_row["email"]),
        created_at=user_row.get("created_at"),
    )


async def list_users() -> list[schemas.UserResponse]:
    rows = await repository.list_users()
    return [_to_user_response(row) for row in rows]


async def create_user(payload: schemas.CreateUserRequest) -> dict:
    password_hash = security.hash_password(payload.password)
    try:
        row = await repository.create_user(
            username=payload.username,
            email=payload.email,
            password_hash=password_hash,
        )
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError(USERNAME_TAKEN) from exc

    await audit.log_action(f"User created: {row['username']}")
    return {"message": "User created.", "user": _to_user_response(row)}


async def update_user(user_id: int, payload: schemas.UpdateUserRequest) -> dict:
    existing = await repository.get_user_by_id(user_id)
    if existing is None:
        raise NotFoundError(NOT_FOUND)

    # Rehash only when a new password was supplied.
    password_hash = security.hash_password(payload.password) if payload.password else None
    try:
        row = await repository.update_user(
            user_id,
            username=payload.username,
            email=payload.email,
            password_hash=password_hash,
        )
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError("Username is already in use by another account.") from exc
    if row is None:
        raise NotFoundError(NOT_FOUND)

    await audit.log_action(f"User updated with ID: {user_id}")
    return {"message": "User updated.", "user": _to_user_response(row)}


async def delete_user(user_id: int) -> dict:
    try:
        deleted = await repository.delete_user(user_id)
    except asyncpg.ForeignKeyViolationError as exc:
        raise ConflictError("Cannot delete the user because it has associated resources.") from exc
    if not deleted:
        raise NotFoundError(NOT_FOUND)
    await audit.log_action(f"User deleted with ID: {user_id}")
    return {"message": "User deleted."}
