"""
Search routes backing the autocomplete widgets of the editors.

All endpoints take ``term`` and return JSON.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..dependencies import get_repository
from ..logging_config import get_logger
from ..metrics import track_search_query
from ..repositories.cell_repository import ICellRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/search", tags=["Search"])


class CellLinkOption(BaseModel):
    """A cell offered in the link picker."""

    value: str = Field(..., description="Cell id")
    label: str = Field(..., description="Cell summary")


@router.get("/sources", response_model=List[str], summary="Search sources")
async def search_sources(
    term: str = Query("", max_length=200),
    repository: ICellRepository = Depends(get_repository),
) -> List[str]:
    track_search_query("sources")
    return [str(source) for source in repository.search_sources(term)]


@router.get("/rooms", response_model=List[str], summary="Search rooms")
async def search_rooms(
    term: str = Query("", max_length=200),
    repository: ICellRepository = Depends(get_repository),
) -> List[str]:
    track_search_query("rooms")
    return repository.search_rooms(term)


@router.get("/cells", response_model=List[CellLinkOption], summary="Search cells")
async def search_cells(
    term: str = Query("", max_length=200),
    repository: ICellRepository = Depends(get_repository),
) -> List[CellLinkOption]:
    """Cells whose title or body contains term, as value/label pairs."""
    logger.debug(f"Searching for cells with {term}")
    track_search_query("cells")
    return [
        CellLinkOption(value=cell.id, label=cell.summary())
        for cell in repository.search_cells(term)
    ]
