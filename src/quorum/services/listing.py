"""Paging and vote annotation shared by the question and reply listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from quorum.core.errors import ValidationError
from quorum.models.post import Post
from quorum.services.vote_ledger import VoteLedger

FilterT = TypeVar("FilterT", bound=IntEnum)


@dataclass
class AnnotatedPost:
    """A listed post plus whether the viewer has upvoted it."""

    post: Post
    is_upvoted: bool = False


@dataclass
class PostPage:
    """One page of a listing and the size of the unpaginated result."""

    total: int
    items: list[AnnotatedPost] = field(default_factory=list)


def require_non_negative(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer")
    return value


def parse_filter(enum_cls: type[FilterT], value: object) -> FilterT:
    """Convert a raw filter number into its enum member."""
    require_non_negative("filter", value)
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown filter: {value}") from exc


def paginate(
    session: Session,
    stmt: Select[tuple[Post]],
    order_by: tuple,
    page: int,
    page_size: int,
    viewer_user_id: str | None,
) -> PostPage:
    """Count ``stmt``, fetch one page of it and annotate the viewer's votes.

    The count ignores pagination. The page window skips ``(page - 1) * page_size``
    rows; page 0 is treated like page 1.
    """
    require_non_negative("page", page)
    require_non_negative("count", page_size)

    total = session.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    offset = max(page - 1, 0) * page_size
    posts = list(
        session.scalars(stmt.order_by(*order_by).offset(offset).limit(page_size))
    )

    # One set-based lookup instead of a query per item; results are merged per post.
    voted = VoteLedger(session).voted_post_ids(viewer_user_id, [post.id for post in posts])
    return PostPage(
        total=total or 0,
        items=[AnnotatedPost(post=post, is_upvoted=post.id in voted) for post in posts],
    )


def newest_first() -> tuple:
    return (Post.created_at.desc(), Post.id.desc())


def oldest_first() -> tuple:
    return (Post.created_at.asc(), Post.id.asc())


def most_voted() -> tuple:
    return (Post.vote_count.desc(), Post.created_at.desc(), Post.id.desc())
