"""
Category request schemas.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from core import validation


class CategoryRequest(BaseModel):
    model_config = ConfigDict(validate_default=True)

    name: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return validation.required_text(value, "Category name is required.")
