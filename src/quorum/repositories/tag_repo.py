"""Data access helpers for tags."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quorum.core.errors import ConflictError, ValidationError
from quorum.core.settings import settings
from quorum.models.tag import Tag

__all__ = ["TagStore"]


class TagStore:
    """Name-keyed tag storage with compare-and-create semantics."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_name(self, name: str) -> Tag | None:
        """Return the tag with exactly this name."""
        return self.session.execute(
            select(Tag).where(Tag.name == name)
        ).scalar_one_or_none()

    def find_by_prefix(self, prefix: str) -> list[Tag]:
        """Return tags whose name starts with ``prefix`` (case-sensitive)."""
        stmt = (
            select(Tag)
            .where(Tag.name.startswith(prefix, autoescape=True))
            .order_by(Tag.name)
        )
        # SQLite's LIKE ignores case; re-check in Python.
        return [tag for tag in self.session.scalars(stmt) if tag.name.startswith(prefix)]

    def create(self, name: str) -> Tag:
        """Insert a new tag.

        Raises:
            ValidationError: If the name is empty or too long.
            ConflictError: If a concurrent writer created the same name first.
        """
        name = self.normalize(name)
        tag = Tag(name=name)
        try:
            with self.session.begin_nested():
                self.session.add(tag)
        except IntegrityError as exc:
            raise ConflictError(f"Tag {name!r} already exists") from exc
        return tag

    @staticmethod
    def normalize(name: str) -> str:
        """Strip surrounding whitespace and enforce the length limit."""
        if not isinstance(name, str):
            raise ValidationError("Tag name must be a string")
        name = name.strip()
        if not name:
            raise ValidationError("Tag name must not be empty")
        if len(name) > settings.tag_name_max_length:
            raise ValidationError(
                f"Tag name exceeds {settings.tag_name_max_length} characters"
            )
        return name
