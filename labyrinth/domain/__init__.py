"""
Domain layer - Cells, sources, rooms and the errors raised against them.

This layer contains the fundamental business objects and rules,
independent of any infrastructure or framework concerns.
"""

from .entities import Cell, CollectionOfCells, Source
from .exceptions import (
    CellNotFoundException,
    InvalidOperationException,
    LabyrinthException,
    RoomNotFoundException,
    ValidationException,
)

__all__ = [
    "Cell",
    "CollectionOfCells",
    "Source",
    "LabyrinthException",
    "CellNotFoundException",
    "RoomNotFoundException",
    "ValidationException",
    "InvalidOperationException",
]
