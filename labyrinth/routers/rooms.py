"""
Room routes: the list of rooms and the cells filed in one room.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..dependencies import get_repository, get_session
from ..domain.exceptions import RoomNotFoundException
from ..repositories.cell_repository import ICellRepository
from ..security import Session
from ..templating import render

router = APIRouter(tags=["Rooms"])


@router.get("/rooms", response_class=HTMLResponse, summary="List rooms")
async def list_rooms(
    request: Request,
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(get_session),
) -> HTMLResponse:
    rooms = repository.list_rooms()
    return render(request, "rooms.html", context={"rooms": rooms}, session=session)


@router.get("/room/{room}", response_class=HTMLResponse, summary="Cells of a room")
async def view_room(
    room: str,
    request: Request,
    repository: ICellRepository = Depends(get_repository),
    session: Session = Depends(get_session),
) -> HTMLResponse:
    """
    Render every cell in a room.

    A room only exists while it has cells, so an empty result raises
    RoomNotFoundException, rendered by the app as a 404 page.
    """
    cells = repository.list_cells_in_room(room)
    if not cells:
        raise RoomNotFoundException(room)

    return render(
        request,
        "cells_collection.html",
        context={"name": room, "cells": cells},
        session=session,
    )
