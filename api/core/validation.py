"""
Field rules shared by the request schemas.

Each rule takes the raw value and returns the normalized one, or raises
`ValueError` with the message that ends up in the 400 response. Schemas wire
them up with pydantic `field_validator(..., mode="before")`.
"""

from __future__ import annotations

import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import ClientInputError, first_error_message

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6

ModelT = TypeVar("ModelT", bound=BaseModel)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(value: Any, message: str) -> str:
    # JSON lists, dicts and numbers are rejected rather than stringified.
    if not isinstance(value, str):
        raise ValueError(message)
    return value


def required_text(value: Any, message: str) -> str:
    if _is_blank(value):
        raise ValueError(message)
    return _text(value, message).strip()


def optional_text(value: Any, message: str) -> str | None:
    if value is None:
        return None
    return required_text(value, message)


def email(value: Any, message: str) -> str:
    raw = _text(value, message).strip()
    if not EMAIL_RE.match(raw):
        raise ValueError(message)
    return raw


def password(value: Any, message: str) -> str:
    raw = _text(value, message)
    if len(raw) < MIN_PASSWORD_LENGTH:
        raise ValueError(message)
    return raw


def positive_int(value: Any, message: str) -> int:
    if isinstance(value, bool):
        raise ValueError(message)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdecimal():
        try:
            parsed = int(value.strip())
        except ValueError as exc:
            raise ValueError(message) from exc
    else:
        raise ValueError(message)
    if parsed <= 0:
        raise ValueError(message)
    return parsed


def parse_model(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """
    Validate loose input (e.g. multipart form fields) into `model`.

    Only the first violation is reported, matching the JSON endpoints.
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ClientInputError(first_error_message(exc.errors())) from exc
