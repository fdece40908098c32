"""
Static pages, health and metrics.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, RedirectResponse

from ..config import Settings
from ..dependencies import get_repository, get_settings
from ..logging_config import get_logger
from ..metrics import metrics_endpoint, update_cell_count
from ..repositories.cell_repository import ICellRepository
from ..templating import not_found

logger = get_logger(__name__)

router = APIRouter()


@router.get("/", include_in_schema=False)
async def homepage() -> RedirectResponse:
    return RedirectResponse(url="/rooms", status_code=302)


@router.get("/page/{page}", tags=["Pages"], summary="Static page")
async def static_page(
    page: str,
    request: Request,
    settings: Settings = Depends(get_settings),
):
    """
    Serve an HTML page from PAGES_DIR.

    Names that resolve outside the directory are treated as missing.
    """
    pages_dir = settings.PAGES_DIR.resolve()
    path = (pages_dir / page).resolve()
    if path.parent != pages_dir or not path.is_file():
        logger.info(f"Error when returning page: {page} not found")
        return not_found(request, f"Page not found: {page}")
    return FileResponse(path, media_type="text/html")


@router.get("/health", tags=["Health"], summary="Health check")
async def health_check(
    settings: Settings = Depends(get_settings),
    repository: ICellRepository = Depends(get_repository),
) -> Dict[str, Any]:
    cells = repository.count()
    update_cell_count(cells)
    return {"status": "healthy", "service": settings.SERVICE_NAME, "cells": cells}


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()
