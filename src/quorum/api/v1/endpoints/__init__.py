# src/quorum/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .discussion import router as discussion_router

__all__ = [
    "discussion_router",
]
