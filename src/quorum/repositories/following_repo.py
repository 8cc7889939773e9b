"""Data access helpers for question subscriptions."""
from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quorum.models.following import QuestionFollowing

__all__ = ["FollowingStore"]


class FollowingStore:
    """Idempotent follow/unfollow rows keyed by (question, user)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def is_following(self, user_id: str, question_id: int) -> bool:
        return self.session.get(QuestionFollowing, (question_id, user_id)) is not None

    def follow(self, user_id: str, question_id: int) -> bool:
        """Subscribe a user; returns False if the row already existed."""
        if self.is_following(user_id, question_id):
            return False
        try:
            with self.session.begin_nested():
                self.session.add(QuestionFollowing(question_id=question_id, user_id=user_id))
        except IntegrityError:
            return False
        return True

    def unfollow(self, user_id: str, question_id: int) -> bool:
        result = self.session.execute(
            delete(QuestionFollowing)
            .where(
                QuestionFollowing.question_id == question_id,
                QuestionFollowing.user_id == user_id,
            )
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def delete_all_by_question(self, question_id: int) -> int:
        """Purge every subscription to a question."""
        result = self.session.execute(
            delete(QuestionFollowing)
            .where(QuestionFollowing.question_id == question_id)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount
