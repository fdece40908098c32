"""
Domain entities for the labyrinth.

Core business objects representing cells, their sources and the rooms
they are grouped into. These entities are framework-agnostic.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

SUMMARY_BODY_LENGTH = 60


@dataclass(frozen=True)
class Source:
    """
    Value object for a single attribution string.

    Two sources are equal when their payloads match.
    """

    source: str

    def __str__(self) -> str:
        return self.source

    def is_blank(self) -> bool:
        return not self.source.strip()


@dataclass
class Cell:
    """
    A card of content.

    Attributes:
        id: Identifier assigned by the repository, None until stored
        title: Display title
        body: Free text
        room: Name of the room the cell belongs to
        sources: Attributions in insertion order
        links: Ids of the cells this one is connected to
    """

    title: str = ""
    body: str = ""
    room: str = ""
    id: Optional[str] = None
    sources: List[Source] = field(default_factory=list)
    links: Set[str] = field(default_factory=set)

    def summary(self) -> str:
        """
        Short label used when picking a cell to link.

        Returns:
            Title followed by the start of the body
        """
        body = " ".join(self.body.split())
        if len(body) > SUMMARY_BODY_LENGTH:
            body = body[:SUMMARY_BODY_LENGTH].rstrip() + "..."
        return f"{self.title}: {body}"

    def copy(self) -> "Cell":
        """Return a detached copy safe to hand out of the repository."""
        return Cell(
            title=self.title,
            body=self.body,
            room=self.room,
            id=self.id,
            sources=list(self.sources),
            links=set(self.links),
        )


@dataclass
class CollectionOfCells:
    """A room and the cells filed under it, derived on read."""

    name: str
    cells: List[Cell] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.cells)
