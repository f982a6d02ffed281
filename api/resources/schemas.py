"""
Resource form schemas.

Resources are written with multipart requests, so the router collects the
raw form fields and validates them through these models
(`core.validation.parse_model`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from core import validation

TITLE_EMPTY = "Title cannot be empty."
USER_ID_INVALID = "User ID must be a positive integer."
CATEGORY_ID_INVALID = "Category ID must be a positive integer."


class CreateResourceForm(BaseModel):
    model_config = ConfigDict(validate_default=True)

    title: str | None = None
    user_id: int | None = None
    category_id: int | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str | None:
        # Optional on create; the original filename is used when omitted.
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return validation.required_text(value, TITLE_EMPTY)

    @field_validator("user_id", mode="before")
    @classmethod
    def _user_id(cls, value: Any) -> int:
        return validation.positive_int(value, USER_ID_INVALID)

    @field_validator("category_id", mode="before")
    @classmethod
    def _category_id(cls, value: Any) -> int:
        return validation.positive_int(value, CATEGORY_ID_INVALID)


class UpdateResourceForm(BaseModel):
    """
    Partial update: only supplied fields are validated and applied.
    """

    title: str | None = None
    user_id: int | None = None
    category_id: int | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str | None:
        return validation.optional_text(value, TITLE_EMPTY)

    @field_validator("user_id", mode="before")
    @classmethod
    def _user_id(cls, value: Any) -> int | None:
        if value is None:
            return None
        return validation.positive_int(value, USER_ID_INVALID)

    @field_validator("category_id", mode="before")
    @classmethod
    def _category_id(cls, value: Any) -> int | None:
        if value is None:
            return None
        return validation.positive_int(value, CATEGORY_ID_INVALID)

    def is_empty(self) -> bool:
        return self.title is None and self.user_id is None and self.category_id is None


class ResourceResponse(BaseModel):
    id: int
    title: str | None
    filename: str
    path: str
    content_type: str | None = None
    size_bytes: int | None = None
    user_id: int
    category_id: int
    upload_date: datetime | None = None
    username: str | None = None
    category_name: str | None = None
