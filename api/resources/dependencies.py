"""
Request dependencies for resource routes.

The storage backend and settings are built once in the app lifespan and kept
on `app.state`.
"""

from __future__ import annotations

from fastapi import Request

from core.config import Settings
from core.storage import StorageBackend


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
