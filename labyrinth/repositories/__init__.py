"""
Repository layer - Cell storage abstractions.

This layer provides the interface for cell storage and retrieval,
hiding implementation details from the HTTP layer.
"""

from .cell_repository import ICellRepository
from .memory_repository import InMemoryCellRepository
from .seed import seed_repository

__all__ = ["ICellRepository", "InMemoryCellRepository", "seed_repository"]
