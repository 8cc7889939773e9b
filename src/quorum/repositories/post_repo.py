"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import ColumnElement, Select, delete, exists, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from quorum.models.post import Post, PostKind, QuestionTag

__all__ = ["PostRepository"]

COUNTER_COLUMNS = frozenset({"vote_count", "reply_count"})


def lock_statement(post_id: int) -> Select[tuple[int]]:
    return select(Post.id).where(Post.id == post_id).with_for_update()


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def get_of_kind(self, post_id: int | None, kind: PostKind) -> Post | None:
        """Return a post only if it exists and has the requested kind."""
        if post_id is None:
            return None
        post = self.get_by_id(post_id)
        if post is None or post.kind != kind:
            return None
        return post

    def lock(self, post_id: int) -> None:
        """Take a row lock on a post until the transaction ends.

        Backends without ``FOR UPDATE`` (SQLite) already serialize writers.
        """
        self.session.execute(lock_statement(post_id))

    def find(self, *criteria: ColumnElement[bool]) -> list[Post]:
        """Return every post matching all criteria, oldest first."""
        result = self.session.execute(
            select(Post).where(*criteria).order_by(Post.id)
        )
        return list(result.scalars())

    def add(self, post: Post) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        self.session.add(post)
        self.session.flush()
        return post

    def adjust_counter(self, post_id: int, counter: str, delta: int) -> bool:
        """Atomically add ``delta`` to a denormalized counter.

        Decrements are guarded so the counter never goes negative. Returns
        False when no row was updated (missing post or guarded underflow).
        """
        if counter not in COUNTER_COLUMNS:
            raise ValueError(f"Unknown counter column: {counter}")
        column = getattr(Post, counter)
        stmt = update(Post).where(Post.id == post_id)
        if delta < 0:
            stmt = stmt.where(column + delta >= 0)
        result = self.session.execute(
            stmt.values({counter: column + delta}).execution_options(
                synchronize_session=False
            )
        )
        self._expire(post_id, counter)
        return result.rowcount == 1

    def clear_accepted(self, *criteria: ColumnElement[bool]) -> int:
        """Clear ``is_accepted`` on every accepted post matching the criteria."""
        ids = list(
            self.session.scalars(
                select(Post.id).where(*criteria, Post.is_accepted.is_(True))
            )
        )
        if not ids:
            return 0
        self.session.execute(
            update(Post)
            .where(Post.id.in_(ids), Post.is_accepted.is_(True))
            .values(is_accepted=False)
            .execution_options(synchronize_session=False)
        )
        for post_id in ids:
            self._expire(post_id, "is_accepted")
        return len(ids)

    def set_accepted(self, post_id: int, accepted: bool) -> None:
        """Persist the accepted flag of a single post."""
        self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(is_accepted=accepted)
            .execution_options(synchronize_session=False)
        )
        self._expire(post_id, "is_accepted")

    def recompute_accepted(self, root_id: int, *thread: ColumnElement[bool]) -> None:
        """Set a root's accepted flag to whether any post in its thread is accepted."""
        any_accepted = bool(
            self.session.scalar(
                select(exists().where(*thread, Post.is_accepted.is_(True)))
            )
        )
        self.set_accepted(root_id, any_accepted)

    def replace_tags(self, post: Post, tag_ids: Sequence[int]) -> None:
        """Replace a question's tag links, keeping the given order."""
        post.tag_links.clear()
        self.session.flush()
        post.tag_links.extend(
            QuestionTag(tag_id=tag_id, position=position)
            for position, tag_id in enumerate(tag_ids)
        )
        self.session.flush()

    def delete_many(self, post_ids: Sequence[int]) -> int:
        """Delete posts and their tag links; already-deleted ids are ignored."""
        if not post_ids:
            return 0
        self.session.execute(
            delete(QuestionTag)
            .where(QuestionTag.post_id.in_(post_ids))
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(
            delete(Post)
            .where(Post.id.in_(post_ids))
            .execution_options(synchronize_session=False)
        )
        for post_id in post_ids:
            instance = self.session.identity_map.get(identity_key(Post, post_id))
            if instance is not None:
                self.session.expunge(instance)
        return result.rowcount

    def _expire(self, post_id: int, attribute: str) -> None:
        instance = self.session.identity_map.get(identity_key(Post, post_id))
        if instance is not None:
            self.session.expire(instance, [attribute])
