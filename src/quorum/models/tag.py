# src/quorum/models/tag.py
"""SQLAlchemy model for question tags."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from quorum.db.session import Base


class Tag(Base):
    """Tag referenced by questions; created on demand and never deleted."""

    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Case-sensitive unique name; the constraint arbitrates concurrent creation.
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
