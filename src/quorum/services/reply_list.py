"""Paginated views over answers and code comments."""

from __future__ import annotations

from enum import IntEnum

from sqlalchemy import select
from sqlalchemy.orm import Session

from quorum.models.post import Post, PostKind
from quorum.services.listing import (
    PostPage,
    most_voted,
    newest_first,
    oldest_first,
    paginate,
    parse_filter,
)


class ReplyFilter(IntEnum):
    """Reply list orderings, numbered as clients send them."""

    MOST_POPULAR = 1
    OLDEST_FIRST = 2
    NEWEST_FIRST = 3


ORDERINGS = {
    ReplyFilter.MOST_POPULAR: most_voted,
    ReplyFilter.OLDEST_FIRST: oldest_first,
    ReplyFilter.NEWEST_FIRST: newest_first,
}


class ReplyListEngine:
    """Lists answers of a question or comments of a code snippet."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_answers(
        self,
        question_id: int,
        filter: int,
        page: int,
        page_size: int,
        viewer_user_id: str | None = None,
    ) -> PostPage:
        mode = parse_filter(ReplyFilter, filter)
        stmt = select(Post).where(
            Post.kind == PostKind.ANSWER,
            Post.parent_id == question_id,
        )
        return paginate(self.session, stmt, ORDERINGS[mode](), page, page_size, viewer_user_id)

    def list_code_comments(
        self,
        content_id: int,
        filter: int,
        page: int,
        page_size: int,
        parent_id: int | None = None,
        viewer_user_id: str | None = None,
    ) -> PostPage:
        """List comments on a code snippet.

        Without ``parent_id`` only top-level comments are returned; with it,
        the direct replies to that comment.
        """
        mode = parse_filter(ReplyFilter, filter)
        parent_clause = Post.parent_id.is_(None) if parent_id is None else Post.parent_id == parent_id
        stmt = select(Post).where(
            Post.kind == PostKind.CODE_COMMENT,
            Post.content_id == content_id,
            parent_clause,
        )
        return paginate(self.session, stmt, ORDERINGS[mode](), page, page_size, viewer_user_id)
