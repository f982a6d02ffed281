"""
Audit log API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import service

router = APIRouter()


@router.get("/logs")
async def list_logs() -> list[dict]:
    return await service.list_logs()
