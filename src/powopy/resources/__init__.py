"""Endpoint wrappers."""

from .search import DEFAULT_CURSOR, DEFAULT_PER_PAGE, Search
from .taxa import Taxa

__all__ = ["DEFAULT_CURSOR", "DEFAULT_PER_PAGE", "Search", "Taxa"]
