"""
HTTP routers for the labyrinth service.
"""

from . import auth, cells, pages, rooms, search

__all__ = ["auth", "cells", "pages", "rooms", "search"]
