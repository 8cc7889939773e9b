# src/quorum/models/code.py
"""Model for shared code snippets that carry their own comment threads."""

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quorum.db.session import Base


class Code(Base):
    """Code snippet owned by the playground; comments attach to it by id."""

    __tablename__ = "code"
    __table_args__ = (
        CheckConstraint("comment_count >= 0", name="ck_code_comment_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # Live code comments across the whole thread tree.
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
