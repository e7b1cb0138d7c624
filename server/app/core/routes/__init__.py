"""Core routes aggregation."""

from .directory import router as directory_router
from .hierarchy import router as hierarchy_router

__all__ = [
    "directory_router",
    "hierarchy_router",
]
