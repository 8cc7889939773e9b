# src/quorum/models/post.py
"""SQLAlchemy models for questions, answers and code comments."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from quorum.core.errors import ValidationError
from quorum.db.session import Base
from quorum.db.time import utcnow

if TYPE_CHECKING:
    from quorum.models.tag import Tag

TITLE_MAX_LENGTH = 120
MESSAGE_MAX_LENGTH = 1000


class PostKind(IntEnum):
    """Discriminator stored in ``post.kind``."""

    QUESTION = 1
    ANSWER = 2
    CODE_COMMENT = 3


class Post(Base):
    """Single polymorphic row for every kind of discussion entry.

    Which optional columns apply depends on ``kind``:

    - Question: ``title`` and tag links; no parent, no content.
    - Answer: ``parent_id`` is the owning question.
    - CodeComment: ``content_id`` is the commented code; ``parent_id`` is the
      comment being replied to, or NULL for a top-level comment.

    ``vote_count`` and ``reply_count`` are denormalized and only ever changed
    through atomic UPDATE statements issued by the services.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("kind IN (1, 2, 3)", name="ck_post_kind"),
        CheckConstraint("vote_count >= 0", name="ck_post_vote_count"),
        CheckConstraint("reply_count >= 0", name="ck_post_reply_count"),
        Index("ix_post_kind_created_at", "kind", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    author_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Parents are looked up by query; there is no database-level cascade.
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    content_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    title: Mapped[str | None] = mapped_column(String(TITLE_MAX_LENGTH), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    tag_links: Mapped[list[QuestionTag]] = relationship(
        "QuestionTag",
        order_by="QuestionTag.position",
        cascade="all, delete-orphan",
    )

    @validates("title")
    def _validate_title(self, _key: str, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not 1 <= len(value) <= TITLE_MAX_LENGTH:
            raise ValidationError(f"title must be 1-{TITLE_MAX_LENGTH} characters")
        return value

    @validates("message")
    def _validate_message(self, _key: str, value: str) -> str:
        value = (value or "").strip()
        if not 1 <= len(value) <= MESSAGE_MAX_LENGTH:
            raise ValidationError(f"message must be 1-{MESSAGE_MAX_LENGTH} characters")
        return value

    @property
    def tag_ids(self) -> list[int]:
        """Tag identifiers of a question in their stored order."""
        return [link.tag_id for link in self.tag_links]

    @property
    def tag_names(self) -> list[str]:
        """Tag names of a question in their stored order."""
        return [link.tag.name for link in self.tag_links]


class QuestionTag(Base):
    """Ordered link between a question and one of its tags."""

    __tablename__ = "question_tag"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id"),
        primary_key=True,
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tag.id"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    tag: Mapped[Tag] = relationship("Tag", lazy="joined")
