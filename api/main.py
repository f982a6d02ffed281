from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from audit import router as audit_router
from categories import router as categories_router
from core import db, errors, storage
from core.config import Settings, get_settings
from resources import router as resources_router
from users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # Initialize the DB pool once per process.
    await db.init_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=settings.db_command_timeout,
    )
    try:
        if settings.init_schema:
            await db.apply_schema()
        app.state.storage = storage.build_storage(settings)
        yield
    finally:
        await db.close_pool()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Resource Library API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    errors.install_handlers(app)

    app.include_router(categories_router.router, prefix="/api", tags=["categories"])
    app.include_router(users_router.router, prefix="/api", tags=["users"])
    app.include_router(resources_router.router, prefix="/api", tags=["resources"])
    app.include_router(audit_router.router, prefix="/api", tags=["logs"])

    @app.get("/healthz", response_class=PlainTextResponse)
    def healthz() -> str:
        return "OK"

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("api_starting host=%s port=%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
