"""
Labyrinth of Babel.

A small server-rendered wiki: cells filed in rooms, attributed to
sources and linked to one another.
"""

__version__ = "1.0.0"
__description__ = "Server-rendered wiki of linked cells"
