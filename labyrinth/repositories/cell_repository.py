"""
Cell repository interface (Abstract Base Class).

Defines the contract for cell storage and retrieval
independent of the underlying storage mechanism.
"""

from abc import ABC, abstractmethod
from typing import List

from ..domain.entities import Cell, CollectionOfCells, Source


class ICellRepository(ABC):
    """
    Abstract repository interface for cell operations.

    Every operation is atomic. Failures are raised as domain exceptions
    and leave the store unchanged.
    """

    @abstractmethod
    def new_cell(self, cell: Cell) -> str:
        """
        Store a new cell and assign it an identifier.

        Args:
            cell: Cell without an id (title, body, room, optional sources and links)

        Returns:
            The generated cell id

        Raises:
            ValidationException: If title, body or room is blank
            CellNotFoundException: If an initial link references an unknown cell
        """
        pass

    @abstractmethod
    def get_cell(self, cell_id: str) -> Cell:
        """
        Get a copy of a stored cell.

        Raises:
            CellNotFoundException: If no cell has this id
        """
        pass

    @abstractmethod
    def update_cell(self, cell: Cell) -> str:
        """
        Replace title, body and room of an existing cell.

        Sources and links of the stored cell are preserved.

        Raises:
            ValidationException: If title, body or room is blank
            CellNotFoundException: If cell.id is unknown
        """
        pass

    @abstractmethod
    def add_source_to_cell(self, cell_id: str, source: Source) -> str:
        """Append a source to a cell."""
        pass

    @abstractmethod
    def remove_source_from_cell(self, cell_id: str, source: Source) -> str:
        """Remove every occurrence of a source from a cell."""
        pass

    @abstractmethod
    def link_cells(self, cell_a: str, cell_b: str) -> None:
        """
        Link two cells in both directions.

        Raises:
            CellNotFoundException: If either cell is unknown
            InvalidOperationException: If both ids are the same
        """
        pass

    @abstractmethod
    def unlink_cells(self, cell_a: str, cell_b: str) -> None:
        """Remove the link between two cells in both directions."""
        pass

    @abstractmethod
    def search_sources(self, term: str) -> List[Source]:
        """Distinct sources containing term, case-insensitive."""
        pass

    @abstractmethod
    def search_rooms(self, term: str) -> List[str]:
        """Distinct room names containing term, case-insensitive."""
        pass

    @abstractmethod
    def search_cells(self, term: str) -> List[Cell]:
        """Cells whose title or body contains term, case-insensitive."""
        pass

    @abstractmethod
    def list_rooms(self) -> List[CollectionOfCells]:
        """One collection per distinct room, sorted by name."""
        pass

    @abstractmethod
    def list_cells_in_room(self, room: str) -> List[Cell]:
        """Cells whose room equals room exactly. Empty if there are none."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored cells."""
        pass
