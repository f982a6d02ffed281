"""
Action logger.

Every mutation appends one human-readable line to `logs`. Writing the entry
is best-effort: a failure is logged here and never reaches the caller.
"""

from __future__ import annotations

import logging

from . import repository

logger = logging.getLogger(__name__)


async def log_action(action: str) -> None:
    try:
        await repository.insert_log(action)
    except Exception:
        logger.exception("audit_log_failed action=%r", action)


async def list_logs() -> list[dict]:
    return await repository.list_logs()
