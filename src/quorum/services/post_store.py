"""Creation, editing, acceptance and cascading deletion of posts.

Every denormalized counter touched here (question answer counts, nested reply
counts, code comment counts) is changed with a single guarded UPDATE, and every
public operation is one unit of work on the session it was given.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import ColumnElement
from sqlalchemy.orm import Session

from quorum.core.errors import (
    ConsistencyError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from quorum.core.settings import settings
from quorum.db.session import transaction
from quorum.models.code import Code
from quorum.models.post import Post, PostKind
from quorum.repositories.code_repo import ContentStore
from quorum.repositories.following_repo import FollowingStore
from quorum.repositories.post_repo import PostRepository
from quorum.services.tag_resolver import TagResolver
from quorum.services.vote_ledger import VoteLedger

logger = logging.getLogger(__name__)

REPLY_KINDS = (PostKind.ANSWER, PostKind.CODE_COMMENT)


class PostStore:
    """Service owning the lifecycle of questions, answers and code comments."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.posts = PostRepository(session)
        self.contents = ContentStore(session)
        self.followings = FollowingStore(session)
        self.tags = TagResolver(session)
        self.votes = VoteLedger(session)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def create_question(
        self,
        author_id: str | None,
        title: str | None,
        message: str,
        tag_names: Sequence[str],
    ) -> Post:
        """Open a new question with its tags resolved (and created if missing)."""
        _require_author(author_id)
        _require_title(title)
        with transaction(self.session):
            tag_ids = self._resolve_tags(tag_names)
            question = self.posts.add(
                Post(
                    kind=PostKind.QUESTION,
                    author_id=author_id,
                    title=title,
                    message=message,
                    vote_count=0,
                    reply_count=0,
                    is_accepted=False,
                )
            )
            self.posts.replace_tags(question, tag_ids)
        logger.info("Question %s created by %s", question.id, author_id)
        return question

    def create_answer(self, author_id: str | None, question_id: int, message: str) -> Post:
        """Answer a question and bump its answer count."""
        _require_author(author_id)
        with transaction(self.session):
            question = self.posts.get_of_kind(question_id, PostKind.QUESTION)
            if question is None:
                raise NotFoundError("Question not found")
            answer = self.posts.add(
                Post(
                    kind=PostKind.ANSWER,
                    author_id=author_id,
                    parent_id=question.id,
                    message=message,
                )
            )
            if not self.posts.adjust_counter(question.id, "reply_count", 1):
                raise NotFoundError("Question not found")
        logger.info("Answer %s posted on question %s", answer.id, question_id)
        return answer

    def create_code_comment(
        self,
        author_id: str | None,
        content_id: int,
        parent_id: int | None,
        message: str,
    ) -> Post:
        """Comment on a code snippet, optionally as a reply to another comment.

        The snippet's comment counter always moves; the parent's reply counter
        only moves for nested replies.
        """
        _require_author(author_id)
        with transaction(self.session):
            content = self.contents.get(content_id)
            if content is None:
                raise NotFoundError("Code not found")
            if parent_id is not None:
                parent = self.posts.get_of_kind(parent_id, PostKind.CODE_COMMENT)
                if parent is None:
                    raise NotFoundError("Parent comment not found")
                if parent.content_id != content.id:
                    raise ValidationError("Parent comment belongs to a different code")

            comment = self.posts.add(
                Post(
                    kind=PostKind.CODE_COMMENT,
                    author_id=author_id,
                    content_id=content.id,
                    parent_id=parent_id,
                    message=message,
                )
            )
            if not self.contents.increment_comments(content.id, 1):
                raise NotFoundError("Code not found")
            if parent_id is not None and not self.posts.adjust_counter(parent_id, "reply_count", 1):
                raise NotFoundError("Parent comment not found")
        logger.info("Comment %s posted on code %s", comment.id, content_id)
        return comment

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_question(self, question_id: int) -> Post:
        question = self.posts.get_of_kind(question_id, PostKind.QUESTION)
        if question is None:
            raise NotFoundError("Question not found")
        return question

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def edit_question(
        self,
        user_id: str | None,
        question_id: int,
        title: str | None,
        message: str,
        tag_names: Sequence[str],
    ) -> Post:
        """Replace title, message and tags of a question owned by ``user_id``.

        The tag set is re-resolved from scratch; old tag references are dropped.
        """
        _require_title(title)
        with transaction(self.session):
            question = self.get_question(question_id)
            _check_author(question, user_id)
            tag_ids = self._resolve_tags(tag_names)
            question.title = title
            question.message = message
            self.posts.replace_tags(question, tag_ids)
        return question

    def edit_reply(
        self,
        user_id: str | None,
        reply_id: int,
        message: str,
        *,
        kind: PostKind = PostKind.ANSWER,
    ) -> Post:
        """Replace the message of an answer or code comment owned by ``user_id``."""
        if kind not in REPLY_KINDS:
            raise ValidationError("Only answers and code comments can be edited as replies")
        with transaction(self.session):
            reply = self.posts.get_of_kind(reply_id, kind)
            if reply is None:
                raise NotFoundError("Post not found")
            _check_author(reply, user_id)
            reply.message = message
            self.session.flush()
        return reply

    # ------------------------------------------------------------------
    # Accepted answer
    # ------------------------------------------------------------------
    def set_accepted(self, post_id: int, accepted: bool, *, user_id: str | None = None) -> bool:
        """Mark or unmark an answer or nested code comment as accepted in its thread.

        Accepting clears any other accepted post in the same thread. The
        thread root's flag is recomputed as "does the thread have an accepted
        post" instead of being copied from the request. Top-level code
        comments have no thread root and cannot be accepted.

        The root row is locked first, so concurrent toggles on one thread
        apply one after the other.

        When ``user_id`` is given it must own the thread: the question author
        for answers, the code author (if the code has one) for comments.
        """
        if not isinstance(accepted, bool):
            raise ValidationError("accepted must be a boolean")

        with transaction(self.session):
            post = self.posts.get_by_id(post_id)
            if post is None:
                raise NotFoundError("Post not found")
            if post.kind not in REPLY_KINDS:
                raise ValidationError("Only answers and code comments can be accepted")

            root, owner_id, thread = self._thread_of(post)
            if user_id is not None and owner_id is not None and owner_id != user_id:
                raise UnauthorizedError("Only the thread owner can accept a reply")

            self.posts.lock(root.id)
            if accepted:
                self.posts.clear_accepted(*thread, Post.id != post.id)
            self.posts.set_accepted(post.id, accepted)
            self.posts.recompute_accepted(root.id, *thread)

        logger.info("Post %s accepted=%s", post_id, accepted)
        return accepted

    def _thread_of(self, post: Post) -> tuple[Post, str | None, tuple[ColumnElement[bool], ...]]:
        """Return (root post, thread owner, criteria selecting the sibling set)."""
        if post.kind == PostKind.ANSWER:
            question = self.posts.get_of_kind(post.parent_id, PostKind.QUESTION)
            if question is None:
                raise NotFoundError("Question not found")
            thread = (Post.kind == PostKind.ANSWER, Post.parent_id == question.id)
            return question, question.author_id, thread

        content: Code | None = self.contents.get(post.content_id)
        if content is None:
            raise NotFoundError("Code not found")
        root = self.posts.get_of_kind(post.parent_id, PostKind.CODE_COMMENT)
        if root is None:
            # Top-level comments, or replies whose parent is gone.
            raise NotFoundError("Parent comment not found")
        thread = (Post.kind == PostKind.CODE_COMMENT, Post.parent_id == root.id)
        return root, content.author_id, thread

    # ------------------------------------------------------------------
    # Following
    # ------------------------------------------------------------------
    def follow_question(self, user_id: str | None, question_id: int) -> bool:
        _require_author(user_id)
        with transaction(self.session):
            self.get_question(question_id)
            created = self.followings.follow(user_id, question_id)
        return created

    def unfollow_question(self, user_id: str | None, question_id: int) -> bool:
        _require_author(user_id)
        with transaction(self.session):
            self.get_question(question_id)
            removed = self.followings.unfollow(user_id, question_id)
        return removed

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------
    def delete_question(self, user_id: str | None, question_id: int) -> None:
        """Delete a question owned by ``user_id`` with its answers, votes and followers."""
        with transaction(self.session):
            question = self.get_question(question_id)
            _check_author(question, user_id)
            removed = self._cleanup((Post.id == question.id,), set())
        logger.info("Question %s deleted (%d posts removed)", question_id, removed)

    def delete_reply(
        self,
        user_id: str | None,
        reply_id: int,
        *,
        kind: PostKind = PostKind.ANSWER,
    ) -> None:
        """Delete an answer or code comment owned by ``user_id``."""
        if kind not in REPLY_KINDS:
            raise ValidationError("Only answers and code comments can be deleted as replies")
        with transaction(self.session):
            reply = self.posts.get_of_kind(reply_id, kind)
            if reply is None:
                raise NotFoundError("Post not found")
            _check_author(reply, user_id)
            removed = self._cleanup((Post.id == reply.id,), set())
        logger.info("Reply %s deleted (%d posts removed)", reply_id, removed)

    def delete_and_cleanup(self, *criteria: ColumnElement[bool]) -> int:
        """Delete every post matching ``criteria`` and repair what referenced it.

        Safe to re-run: the whole cascade is one transaction, so an interrupted
        run leaves nothing behind, and a repeated run matches nothing.

        Returns:
            Number of post rows removed, including cascaded children.
        """
        with transaction(self.session):
            return self._cleanup(criteria, set())

    def _cleanup(self, criteria: Sequence[ColumnElement[bool]], done: set[int]) -> int:
        matched = self.posts.find(*criteria)
        removed = 0

        for post in matched:
            if post.id in done:
                # Already removed by a cascade started earlier in this loop.
                continue

            if post.kind == PostKind.QUESTION:
                removed += self._cleanup((Post.parent_id == post.id,), done)
                self.followings.delete_all_by_question(post.id)

            elif post.kind == PostKind.ANSWER:
                question = self.posts.get_by_id(post.parent_id) if post.parent_id else None
                if question is None:
                    raise _inconsistent(f"Answer {post.id} has no question {post.parent_id}")
                if not self.posts.adjust_counter(question.id, "reply_count", -1):
                    raise _inconsistent(f"Answer count of question {question.id} out of sync")

            elif post.kind == PostKind.CODE_COMMENT:
                if not self.contents.increment_comments(post.content_id, -1):
                    raise _inconsistent(
                        f"Comment {post.id}: code {post.content_id} missing or counter out of sync"
                    )
                parent = self.posts.get_of_kind(post.parent_id, PostKind.CODE_COMMENT)
                if parent is not None:
                    if not self.posts.adjust_counter(parent.id, "reply_count", -1):
                        raise _inconsistent(f"Reply count of comment {parent.id} out of sync")
                else:
                    # Thread root: its replies go with it.
                    removed += self._cleanup((Post.parent_id == post.id,), done)

            self.votes.purge(post.id)
            done.add(post.id)

        removed += self.posts.delete_many([post.id for post in matched])
        return removed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _resolve_tags(self, tag_names: Sequence[str]) -> list[int]:
        tag_ids = list(dict.fromkeys(self.tags.resolve(tag_names)))
        if len(tag_ids) > settings.max_question_tags:
            raise ValidationError(f"tags exceed limit of {settings.max_question_tags}")
        return tag_ids


def _require_author(user_id: str | None) -> None:
    if not user_id:
        raise UnauthorizedError("An authenticated user is required")


def _require_title(title: str | None) -> None:
    if title is None:
        raise ValidationError("Questions require a title")


def _check_author(post: Post, user_id: str | None) -> None:
    if not user_id or post.author_id != user_id:
        raise UnauthorizedError("Unauthorized")


def _inconsistent(message: str) -> ConsistencyError:
    logger.error("Consistency violation: %s", message)
    return ConsistencyError(message)
