"""
In-memory cell repository.

Holds every cell, the room index and the link sets of the running process.
A single lock serializes all operations, reads included. The store is
small and no operation does I/O, so one coarse lock is enough.
"""

import threading
from typing import Callable, Dict, Iterable, List, Optional, Set
from uuid import uuid4

from ..domain.entities import Cell, CollectionOfCells, Source
from ..domain.exceptions import (
    CellNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from .cell_repository import ICellRepository

REQUIRED_FIELDS = ("title", "body", "room")

# Upper bound on retries when the id factory hands back an id already issued
MAX_ID_ATTEMPTS = 10


def _default_id_factory() -> str:
    return str(uuid4())


def _validate_required(cell: Cell) -> None:
    """
    Check that title, body and room are non-blank.

    Raises:
        ValidationException: Listing every blank field
    """
    blank = [name for name in REQUIRED_FIELDS if not getattr(cell, name, "").strip()]
    if blank:
        raise ValidationException(
            field=blank[0],
            value=getattr(cell, blank[0]),
            reason="must not be empty",
            fields=blank,
        )


def _validate_sources(sources: Iterable[Source]) -> None:
    for source in sources:
        if source.is_blank():
            raise ValidationException(
                field="source", value=source.source, reason="must not be empty"
            )


class InMemoryCellRepository(ICellRepository):
    """
    Thread-safe in-memory implementation of ICellRepository.

    Attributes:
        _cells: Stored cells keyed by id, in creation order
        _rooms: Room index, room name -> ids of its cells in joining order
        _issued_ids: Every id ever handed out, so none is reused
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        """
        Initialize an empty repository.

        Args:
            id_factory: Callable producing candidate ids (default: UUID4 strings)
        """
        self._lock = threading.Lock()
        self._id_factory = id_factory or _default_id_factory
        self._cells: Dict[str, Cell] = {}
        self._rooms: Dict[str, Dict[str, None]] = {}
        self._issued_ids: Set[str] = set()

    # ==================== CELLS ====================

    def new_cell(self, cell: Cell) -> str:
        if cell.id:
            raise InvalidOperationException(
                "new cell", "ids are assigned by the repository"
            )
        _validate_required(cell)
        _validate_sources(cell.sources)

        with self._lock:
            for linked_id in cell.links:
                self._require(linked_id)

            cell_id = self._next_id()
            stored = Cell(
                title=cell.title,
                body=cell.body,
                room=cell.room,
                id=cell_id,
                sources=list(cell.sources),
                links=set(cell.links),
            )
            self._cells[cell_id] = stored
            self._index_room(stored.room, cell_id)
            for linked_id in stored.links:
                self._cells[linked_id].links.add(cell_id)

        return cell_id

    def get_cell(self, cell_id: str) -> Cell:
        with self._lock:
            return self._require(cell_id).copy()

    def update_cell(self, cell: Cell) -> str:
        if not cell.id:
            raise ValidationException(
                field="id", value=cell.id, reason="must not be empty"
            )
        _validate_required(cell)

        with self._lock:
            stored = self._require(cell.id)
            if stored.room != cell.room:
                self._unindex_room(stored.room, stored.id)
                self._index_room(cell.room, stored.id)
            stored.title = cell.title
            stored.body = cell.body
            stored.room = cell.room

        return cell.id

    def count(self) -> int:
        with self._lock:
            return len(self._cells)

    # ==================== SOURCES ====================

    def add_source_to_cell(self, cell_id: str, source: Source) -> str:
        _validate_sources([source])
        with self._lock:
            self._require(cell_id).sources.append(source)
        return cell_id

    def remove_source_from_cell(self, cell_id: str, source: Source) -> str:
        with self._lock:
            stored = self._require(cell_id)
            stored.sources = [s for s in stored.sources if s != source]
        return cell_id

    def search_sources(self, term: str) -> List[Source]:
        needle = term.casefold()
        found: Dict[Source, None] = {}
        with self._lock:
            for cell in self._cells.values():
                for source in cell.sources:
                    if needle in source.source.casefold():
                        found.setdefault(source, None)
        return list(found)

    # ==================== LINKS ====================

    def link_cells(self, cell_a: str, cell_b: str) -> None:
        if cell_a == cell_b:
            raise InvalidOperationException("link", "a cell cannot link to itself")
        with self._lock:
            first = self._require(cell_a)
            second = self._require(cell_b)
            first.links.add(cell_b)
            second.links.add(cell_a)

    def unlink_cells(self, cell_a: str, cell_b: str) -> None:
        if cell_a == cell_b:
            raise InvalidOperationException("unlink", "a cell cannot link to itself")
        with self._lock:
            first = self._require(cell_a)
            second = self._require(cell_b)
            first.links.discard(cell_b)
            second.links.discard(cell_a)

    # ==================== SEARCH & ROOMS ====================

    def search_cells(self, term: str) -> List[Cell]:
        needle = term.casefold()
        with self._lock:
            return [
                cell.copy()
                for cell in self._cells.values()
                if needle in cell.title.casefold() or needle in cell.body.casefold()
            ]

    def search_rooms(self, term: str) -> List[str]:
        needle = term.casefold()
        with self._lock:
            return [room for room in self._rooms if needle in room.casefold()]

    def list_rooms(self) -> List[CollectionOfCells]:
        with self._lock:
            collections = [
                CollectionOfCells(
                    name=room,
                    cells=[self._cells[cell_id].copy() for cell_id in cell_ids],
                )
                for room, cell_ids in self._rooms.items()
            ]
        return sorted(collections, key=lambda collection: collection.name.casefold())

    def list_cells_in_room(self, room: str) -> List[Cell]:
        with self._lock:
            cell_ids = self._rooms.get(room, {})
            return [self._cells[cell_id].copy() for cell_id in cell_ids]

    # ==================== INTERNALS (lock held) ====================

    def _require(self, cell_id: str) -> Cell:
        cell = self._cells.get(cell_id)
        if cell is None:
            raise CellNotFoundException(cell_id)
        return cell

    def _next_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate
        raise InvalidOperationException(
            "new cell", f"no unused id after {MAX_ID_ATTEMPTS} attempts"
        )

    def _index_room(self, room: str, cell_id: str) -> None:
        self._rooms.setdefault(room, {})[cell_id] = None

    def _unindex_room(self, room: str, cell_id: str) -> None:
        cell_ids = self._rooms.get(room)
        if cell_ids is None:
            return
        cell_ids.pop(cell_id, None)
        if not cell_ids:
            del self._rooms[room]
