"""Seed the repository with a small demo library."""

import logging
from typing import Dict, List

from ..domain.entities import Cell, Source
from .cell_repository import ICellRepository

logger = logging.getLogger(__name__)

# Demo cells keyed by a local name used only to wire up links below
DEMO_CELLS = [
    {
        "key": "labyrinth",
        "title": "The Library of Babel",
        "body": (
            "The universe (which others call the Library) is composed of an "
            "indefinite, perhaps infinite number of hexagonal galleries."
        ),
        "room": "Habitación",
        "sources": ["Jorge Luis Borges"],
    },
    {
        "key": "learning",
        "title": "Learning without thought",
        "body": (
            "Learning without thought is labor lost; thought without learning "
            "is perilous."
        ),
        "room": "Habitación",
        "sources": ["Confucius", "The Analects"],
    },
    {
        "key": "map",
        "title": "The map is not the territory",
        "body": (
            "A map is not the territory it represents, but, if correct, it has "
            "a similar structure to the territory, which accounts for its usefulness."
        ),
        "room": "Models",
        "sources": ["Alfred Korzybski"],
    },
    {
        "key": "notes",
        "title": "Notes as a second memory",
        "body": (
            "Small atomic notes, linked to each other, let ideas meet in ways "
            "a linear notebook never allows."
        ),
        "room": "Models",
        "sources": [],
    },
]

DEMO_LINKS = [
    ("labyrinth", "learning"),
    ("labyrinth", "map"),
    ("map", "notes"),
]


def seed_repository(repository: ICellRepository) -> List[str]:
    """
    Load the demo library into a repository.

    Args:
        repository: Repository to populate

    Returns:
        Ids of the created cells, in DEMO_CELLS order
    """
    ids: Dict[str, str] = {}
    for demo in DEMO_CELLS:
        ids[demo["key"]] = repository.new_cell(
            Cell(
                title=demo["title"],
                body=demo["body"],
                room=demo["room"],
                sources=[Source(source) for source in demo["sources"]],
            )
        )

    for first, second in DEMO_LINKS:
        repository.link_cells(ids[first], ids[second])

    logger.info(
        "Seeded repository with demo cells",
        extra={"extra_fields": {"cells": len(ids), "links": len(DEMO_LINKS)}},
    )
    return [ids[demo["key"]] for demo in DEMO_CELLS]
