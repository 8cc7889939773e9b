"""Data access helpers for the code snippets that own comment threads."""
from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from quorum.models.code import Code

__all__ = ["ContentStore"]


class ContentStore:
    """Lookup and comment-counter maintenance for code snippets."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, content_id: int | None) -> Code | None:
        """Return a code snippet by identifier."""
        if content_id is None:
            return None
        return self.session.get(Code, content_id)

    def increment_comments(self, content_id: int, delta: int) -> bool:
        """Atomically add ``delta`` to the comment counter.

        Returns False if the snippet is missing or the counter would go negative.
        """
        stmt = update(Code).where(Code.id == content_id)
        if delta < 0:
            stmt = stmt.where(Code.comment_count + delta >= 0)
        result = self.session.execute(
            stmt.values(comment_count=Code.comment_count + delta).execution_options(
                synchronize_session=False
            )
        )
        instance = self.session.identity_map.get(identity_key(Code, content_id))
        if instance is not None:
            self.session.expire(instance, ["comment_count"])
        return result.rowcount == 1
