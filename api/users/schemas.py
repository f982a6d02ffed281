"""
User API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from core import validation

USERNAME_REQUIRED = "Username is required."
EMAIL_INVALID = "Email is not valid."
PASSWORD_TOO_SHORT = f"Password must be at least {validation.MIN_PASSWORD_LENGTH} characters long."


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(validate_default=True)

    username: str | None = None
    email: str | None = None
    password: str | None = None

    @field_validator("username", mode="before")
    @classmethod
    def _username(cls, value: Any) -> str:
        return validation.required_text(value, USERNAME_REQUIRED)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> str:
        return validation.email(value, EMAIL_INVALID)

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, value: Any) -> str:
        return validation.password(value, PASSWORD_TOO_SHORT)


class UpdateUserRequest(BaseModel):
    """
    Partial update: omitted (or null) fields keep their stored value.
    """

    username: str | None = None
    email: str | None = None
    password: str | None = None

    @field_validator("username", mode="before")
    @classmethod
    def _username(cls, value: Any) -> str | None:
        return validation.optional_text(value, USERNAME_REQUIRED)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> str | None:
        if value is None:
            return None
        return validation.email(value, EMAIL_INVALID)

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, value: Any) -> str | None:
        if value is None:
            return None
        return validation.password(value, PASSWORD_TOO_SHORT)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime | None = None
