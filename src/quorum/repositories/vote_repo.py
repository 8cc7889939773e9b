"""Data access helpers for upvote rows."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quorum.models.vote import Upvote

__all__ = ["UpvoteStore"]


class UpvoteStore:
    """One row per (user, post) pair, enforced by the composite primary key."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def exists(self, user_id: str, post_id: int) -> bool:
        return self.session.get(Upvote, (post_id, user_id)) is not None

    def insert_if_absent(self, user_id: str, post_id: int) -> bool:
        """Create the row; returns False if it already existed."""
        if self.exists(user_id, post_id):
            return False
        try:
            with self.session.begin_nested():
                self.session.add(Upvote(post_id=post_id, user_id=user_id))
        except IntegrityError:
            return False
        return True

    def delete(self, user_id: str, post_id: int) -> bool:
        """Delete the row; returns False if there was nothing to delete."""
        result = self.session.execute(
            delete(Upvote)
            .where(Upvote.post_id == post_id, Upvote.user_id == user_id)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def delete_all_for_post(self, post_id: int) -> int:
        result = self.session.execute(
            delete(Upvote)
            .where(Upvote.post_id == post_id)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount

    def voted_post_ids(self, user_id: str, post_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``post_ids`` the user has upvoted."""
        post_ids = list(post_ids)
        if not post_ids:
            return set()
        return set(
            self.session.scalars(
                select(Upvote.post_id).where(
                    Upvote.user_id == user_id,
                    Upvote.post_id.in_(post_ids),
                )
            )
        )
