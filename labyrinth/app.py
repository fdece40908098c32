"""
Labyrinth of Babel - Main FastAPI Application.

Server-rendered wiki of cells: titled cards filed in rooms, with sources
and links to other cells. Reading is open; editing sits behind a login.
The cell repository is built here once and handed to every route through
``app.state``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from .config import PACKAGE_DIR, Settings
from .config import settings as default_settings
from .dependencies import LoginRequiredException
from .domain.exceptions import CellNotFoundException, RoomNotFoundException
from .logging_config import get_logger, setup_logging
from .metrics import track_request_metrics, update_cell_count
from .middleware import (
    PrometheusMiddleware,
    RequestLoggingMiddleware,
    StaticFileCacheMiddleware,
)
from .repositories import ICellRepository, InMemoryCellRepository, seed_repository
from .routers import auth, cells, pages, rooms, search
from .templating import not_found

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Logs configuration on startup and the final cell count on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        f"Starting {settings.APP_NAME}",
        extra={
            "extra_fields": {
                "service_name": settings.SERVICE_NAME,
                "debug_mode": settings.DEBUG,
                "log_level": settings.LOG_LEVEL,
                "auth_disabled": settings.AUTH_DISABLED,
                "login_configured": settings.ADMIN_PASSWORD_HASH is not None,
                "cells": app.state.repository.count(),
            }
        },
    )
    if settings.AUTH_DISABLED:
        logger.warning("Login gate disabled, every visitor can edit")

    yield

    logger.info(
        f"Shutting down {settings.APP_NAME}",
        extra={"extra_fields": {"cells": app.state.repository.count()}},
    )


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[ICellRepository] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (default: the environment-derived settings)
        repository: Repository to serve; a fresh in-memory one when None,
            seeded with demo cells if SEED_DEMO_DATA is set

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    setup_logging(
        log_level=settings.LOG_LEVEL,
        service_name=settings.SERVICE_NAME,
        use_json=settings.USE_JSON_LOGGING,
    )

    if repository is None:
        repository = InMemoryCellRepository()
        logger.info("Initialized InMemoryCellRepository")
        if settings.SEED_DEMO_DATA:
            seed_repository(repository)
    update_cell_count(repository.count())

    app = FastAPI(
        title=settings.APP_NAME,
        description="Cells, rooms, sources and links",
        version="1.0.0",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    # Order matters - first added is last executed
    app.add_middleware(StaticFileCacheMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)

    app.mount(
        "/static",
        StaticFiles(directory=str(PACKAGE_DIR / "static")),
        name="static",
    )

    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(rooms.router)
    app.include_router(cells.router)
    app.include_router(search.router)

    @app.exception_handler(CellNotFoundException)
    async def cell_not_found_handler(
        request: Request, exc: CellNotFoundException
    ) -> HTMLResponse:
        logger.info(
            f"Error when returning card: {exc.message}",
            extra={"extra_fields": {"path": request.url.path}},
        )
        return not_found(request, exc.message)

    @app.exception_handler(RoomNotFoundException)
    async def room_not_found_handler(
        request: Request, exc: RoomNotFoundException
    ) -> HTMLResponse:
        logger.info(
            f"Error when entering room: {exc.message}",
            extra={"extra_fields": {"path": request.url.path}},
        )
        return not_found(request, exc.message)

    @app.exception_handler(LoginRequiredException)
    async def login_required_handler(
        request: Request, exc: LoginRequiredException
    ) -> RedirectResponse:
        return RedirectResponse(url=f"/login?next={quote(exc.next_path)}", status_code=302)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
