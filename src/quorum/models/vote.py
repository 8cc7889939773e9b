# src/quorum/models/vote.py
"""Models capturing upvotes on posts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from quorum.db.session import Base
from quorum.db.time import utcnow


class Upvote(Base):
    """Per-user upvote on a post.

    Presence means the user upvoted the post; there is no direction or weight.
    """

    __tablename__ = "upvote"
    __table_args__ = (
        Index("ix_upvote_user_id", "user_id"),
    )

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Composite primary key prevents duplicate votes from the same user.

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
