"""
Application error taxonomy.

Services raise these; `main.py` registers the handlers that turn them into
`{"message": ...}` JSON responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Internal server error."


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = GENERIC_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ClientInputError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class PayloadTooLargeError(ClientInputError):
    status_code = 413
    default_message = "File too large."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


# Unique and foreign-key violations are reported as bad requests.
class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflicting data."


class UpstreamStorageError(AppError):
    default_message = "Storage operation failed."


# The message is for the server log only; clients get GENERIC_MESSAGE.
class InternalError(AppError):
    pass


def first_error_message(errors: list[dict]) -> str:
    """
    Pick a readable message out of a pydantic error list.
    """
    if not errors:
        return ClientInputError.default_message
    err = errors[0]
    msg = str(err.get("msg") or ClientInputError.default_message)
    # Custom validators surface as "Value error, <message>".
    if err.get("type") == "value_error" and msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
    if loc:
        return f"{loc[-1]}: {msg}"
    return msg


def _json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("internal_error method=%s path=%s detail=%s", request.method, request.url.path, exc.message)
        return _json(exc.status_code, GENERIC_MESSAGE)
    return _json(exc.status_code, exc.message)


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _json(status.HTTP_400_BAD_REQUEST, first_error_message(list(exc.errors())))


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return _json(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_MESSAGE)


def install_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
