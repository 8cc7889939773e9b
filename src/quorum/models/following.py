# src/quorum/models/following.py
"""Subscriptions of users to questions."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from quorum.db.session import Base


class QuestionFollowing(Base):
    """Join table mapping users to the questions they follow."""

    __tablename__ = "question_following"

    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # No timestamps; presence implies subscription.
