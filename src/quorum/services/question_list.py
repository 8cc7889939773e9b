"""Filtered, paginated views over questions."""

from __future__ import annotations

from datetime import timedelta
from enum import IntEnum

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, aliased

from quorum.core.errors import ValidationError
from quorum.core.settings import settings
from quorum.db.time import utcnow
from quorum.models.post import Post, PostKind, QuestionTag
from quorum.models.tag import Tag
from quorum.services.listing import (
    PostPage,
    most_voted,
    newest_first,
    paginate,
    parse_filter,
)


class QuestionFilter(IntEnum):
    """Question list modes, numbered as clients send them."""

    MOST_RECENT = 1
    UNANSWERED = 2
    MY_QUESTIONS = 3
    MY_REPLIES = 4
    HOT_TODAY = 5


class QuestionListEngine:
    """Builds question listings annotated with the viewer's votes."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list(
        self,
        filter: int,
        page: int,
        page_size: int,
        search_query: str | None = None,
        profile_user_id: str | None = None,
        viewer_user_id: str | None = None,
    ) -> PostPage:
        """Return one page of questions and the total number matching.

        Args:
            filter: A ``QuestionFilter`` value.
            page: 1-based page number.
            page_size: Maximum number of items on the page.
            search_query: Matches titles by case-insensitive prefix, or an
                exact tag name.
            profile_user_id: Whose questions/replies to list for the
                "my questions" and "my replies" filters.
            viewer_user_id: Caller, used only for the ``is_upvoted`` flag.

        Raises:
            ValidationError: On malformed paging values, an unknown filter, or
                a profile filter without ``profile_user_id``.
        """
        mode = parse_filter(QuestionFilter, filter)
        stmt = select(Post).where(Post.kind == PostKind.QUESTION)

        query = (search_query or "").strip()
        if query:
            tagged = select(QuestionTag.post_id).where(
                QuestionTag.tag_id.in_(select(Tag.id).where(Tag.name == query))
            )
            stmt = stmt.where(
                or_(
                    func.lower(Post.title).startswith(query.lower(), autoescape=True),
                    Post.id.in_(tagged),
                )
            )

        order_by = newest_first()
        if mode == QuestionFilter.UNANSWERED:
            stmt = stmt.where(Post.reply_count == 0)
        elif mode == QuestionFilter.MY_QUESTIONS:
            stmt = stmt.where(Post.author_id == _require_profile(profile_user_id))
        elif mode == QuestionFilter.MY_REPLIES:
            answer = aliased(Post)
            answered = select(answer.parent_id).where(
                answer.kind == PostKind.ANSWER,
                answer.author_id == _require_profile(profile_user_id),
            )
            stmt = stmt.where(Post.id.in_(answered))
        elif mode == QuestionFilter.HOT_TODAY:
            since = utcnow() - timedelta(hours=settings.hot_window_hours)
            stmt = stmt.where(Post.created_at > since)
            order_by = most_voted()

        return paginate(self.session, stmt, order_by, page, page_size, viewer_user_id)


def _require_profile(profile_user_id: str | None) -> str:
    if not profile_user_id:
        raise ValidationError("profileId is required for this filter")
    return profile_user_id
