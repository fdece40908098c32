"""
Cell routes: viewing, creating and editing cells, their sources and links.
"""

from typing import List

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from ..dependencies import get_repository, get_session, require_login
from ..domain.entities import Cell, Source
from ..domain.exceptions import (
    CellNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from ..logging_config import get_logger
from ..metrics import track_cell_operation, update_cell_count
from ..repositories.cell_repository import ICellRepository
from ..security import Session
from ..templating import render

logger = get_logger(__name__)

router = APIRouter(tags=["Cells"])


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=path, status_code=302)


def _linked_cells(repository: ICellRepository, cell: Cell) -> List[Cell]:
    """Resolve a cell's link ids to cells, sorted by title."""
    linked = []
    for linked_id in cell.links:
        try:
            linked.append(repository.get_cell(linked_id))
        except CellNotFoundException:
            logger.warning(
                "Linked cell vanished",
                extra={"extra_fields": {"cell_id": cell.id, "linked_id": linked_id}},
            )
    return sorted(linked, key=lambda linked_cell: linked_cell.title.casefold())


# ==================== VIEW & EDIT PAGES ====================


@router.get("/cell/{cell_id}", response_class=HTMLResponse, summary="View a cell")
async def view_cell(
    cell_id: str,
    request: Request,
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(get_session),
) -> HTMLResponse:
    """
    Render a cell as a card with its sources and links.

    Unknown ids raise CellNotFoundException, rendered by the app as a 404 page.
    """
    cell = repository.get_cell(cell_id)
    return render(
        request,
        "card.html",
        context={"cell": cell, "links": _linked_cells(repository, cell)},
        session=session,
    )


@router.get("/cell/{cell_id}/edit", response_class=HTMLResponse)
async def edit_cell_page(
    cell_id: str,
    request: Request,
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
) -> HTMLResponse:
    cell = repository.get_cell(cell_id)
    return render(request, "edit_card.html", context={"cell": cell}, session=session)


@router.get("/cell/{cell_id}/sources", response_class=HTMLResponse)
async def edit_sources_page(
    cell_id: str,
    request: Request,
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
) -> HTMLResponse:
    cell = repository.get_cell(cell_id)
    return render(request, "edit_sources.html", context={"cell": cell}, session=session)


@router.get("/cell/{cell_id}/links", response_class=HTMLResponse)
async def edit_links_page(
    cell_id: str,
    request: Request,
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
) -> HTMLResponse:
    cell = repository.get_cell(cell_id)
    return render(
        request,
        "edit_links.html",
        context={"cell": cell, "links": _linked_cells(repository, cell)},
        session=session,
    )


@router.get("/new", response_class=HTMLResponse, summary="New cell form")
async def new_cell_page(
    request: Request,
    room: str = "",
    session: Session = Depends(require_login),
) -> HTMLResponse:
    return render(request, "new_card.html", context={"room": room}, session=session)


# ==================== CREATE & UPDATE ====================


@router.post("/newCell", summary="Create a cell")
async def create_cell(
    title: str = Form(""),
    body: str = Form(""),
    room: str = Form(""),
    source: List[str] = Form(default=[]),
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
):
    """
    Create a cell from the new-cell form and redirect to it.

    Blank source fields are dropped. Returns 400 with the error text
    when title, body or room is missing.
    """
    logger.info(f"New cell title: {title}")
    new_cell = Cell(
        title=title,
        body=body,
        room=room,
        sources=[Source(text.strip()) for text in source if text.strip()],
    )
    try:
        cell_id = repository.new_cell(new_cell)
    except ValidationException as e:
        track_cell_operation("create", success=False)
        logger.warning(
            f"Error when creating card: {e.message}",
            extra={"extra_fields": e.details},
        )
        return PlainTextResponse(f"Error when creating card: {e.message}", status_code=400)

    track_cell_operation("create", success=True)
    update_cell_count(repository.count())
    return _redirect(f"/cell/{cell_id}")


@router.post("/save", summary="Update a cell")
async def save_cell(
    cell_id: str = Form("", alias="cellId"),
    title: str = Form(""),
    body: str = Form(""),
    room: str = Form(""),
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
):
    """
    Replace title, body and room of a cell and redirect to it.

    Returns 400 with the error text on validation failure. Unknown ids
    fall through to the app's 404 page.
    """
    try:
        repository.update_cell(Cell(id=cell_id, title=title, body=body, room=room))
    except ValidationException as e:
        track_cell_operation("update", success=False)
        logger.warning(
            f"Error when updating card: {e.message}",
            extra={"extra_fields": {"cell_id": cell_id, **e.details}},
        )
        return PlainTextResponse(f"Error when updating card: {e.message}", status_code=400)

    track_cell_operation("update", success=True)
    return _redirect(f"/cell/{cell_id}")


# ==================== SOURCES ====================


@router.post("/cell/{cell_id}/sources/add")
async def add_source(
    cell_id: str,
    source: str = Form(""),
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
):
    try:
        repository.add_source_to_cell(cell_id, Source(source.strip()))
    except ValidationException as e:
        track_cell_operation("add_source", success=False)
        logger.warning(f"Error when adding source: {e.message}")
        return PlainTextResponse(f"Error when adding source: {e.message}", status_code=400)

    track_cell_operation("add_source", success=True)
    return _redirect(f"/cell/{cell_id}/sources")


@router.post("/cell/{cell_id}/sources/remove")
async def remove_source(
    cell_id: str,
    source: str = Form(""),
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
):
    repository.remove_source_from_cell(cell_id, Source(source.strip()))
    track_cell_operation("remove_source", success=True)
    return _redirect(f"/cell/{cell_id}/sources")


# ==================== LINKS ====================


@router.post("/cell/{cell_id}/links/add")
async def link_cells(
    cell_id: str,
    cell_to_link: str = Form("", alias="cellToLink"),
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
):
    """Link two cells. Failures are logged and the editor is shown again."""
    try:
        repository.link_cells(cell_id, cell_to_link)
        track_cell_operation("link", success=True)
    except (CellNotFoundException, InvalidOperationException) as e:
        track_cell_operation("link", success=False)
        logger.warning(
            f"Error when linking cells: {e.message}",
            extra={"extra_fields": {"cell_id": cell_id, "cell_to_link": cell_to_link}},
        )
    return _redirect(f"/cell/{cell_id}/links")


@router.post("/cell/{cell_id}/links/remove")
async def unlink_cells(
    cell_id: str,
    cell_to_unlink: str = Form("", alias="cellToUnlink"),
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(require_login),
):
    try:
        repository.unlink_cells(cell_id, cell_to_unlink)
        track_cell_operation("unlink", success=True)
    except (CellNotFoundException, InvalidOperationException) as e:
        track_cell_operation("unlink", success=False)
        logger.warning(
            f"Error when unlinking cells: {e.message}",
            extra={
                "extra_fields": {"cell_id": cell_id, "cell_to_unlink": cell_to_unlink}
            },
        )
    return _redirect(f"/cell/{cell_id}/links")
