# src/quorum/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import discussion_router

__all__ = [
    "discussion_router",
]
