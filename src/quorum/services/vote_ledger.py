"""Upvote bookkeeping that keeps ``Post.vote_count`` in step with the ledger."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from quorum.core.errors import ConsistencyError, NotFoundError, UnauthorizedError, ValidationError
from quorum.db.session import transaction
from quorum.repositories.post_repo import PostRepository
from quorum.repositories.vote_repo import UpvoteStore

logger = logging.getLogger(__name__)


class VoteLedger:
    """Records at most one upvote per (user, post) pair."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.posts = PostRepository(session)
        self.upvotes = UpvoteStore(session)

    def set_vote(self, user_id: str | None, post_id: int, desired: int) -> int:
        """Idempotently set the caller's vote on a post.

        The ledger row and the counter change commit together or not at all.

        Args:
            user_id: Authenticated voter.
            post_id: Target post.
            desired: 1 to upvote, 0 to withdraw the upvote.

        Returns:
            The caller's vote state on the post after the call (0 or 1).

        Raises:
            ValidationError: If ``desired`` is not 0 or 1.
            UnauthorizedError: If the caller is anonymous.
            NotFoundError: If the post does not exist.
        """
        if isinstance(desired, bool) or desired not in (0, 1):
            raise ValidationError("vote must be 0 or 1")
        if not user_id:
            raise UnauthorizedError("Voting requires an authenticated user")

        with transaction(self.session):
            if self.posts.get_by_id(post_id) is None:
                raise NotFoundError("Post not found")

            if desired == 1:
                if self.upvotes.insert_if_absent(user_id, post_id):
                    if not self.posts.adjust_counter(post_id, "vote_count", 1):
                        raise NotFoundError("Post not found")
            elif self.upvotes.delete(user_id, post_id):
                if not self.posts.adjust_counter(post_id, "vote_count", -1):
                    logger.error("Vote counter underflow on post %s", post_id)
                    raise ConsistencyError(f"Vote counter of post {post_id} out of sync")

        return desired

    def voted_post_ids(self, user_id: str | None, post_ids: Iterable[int]) -> set[int]:
        """Return which of ``post_ids`` the viewer has upvoted (none when anonymous)."""
        if not user_id:
            return set()
        return self.upvotes.voted_post_ids(user_id, post_ids)

    def is_upvoted(self, user_id: str | None, post_id: int) -> bool:
        return bool(user_id) and self.upvotes.exists(user_id, post_id)

    def purge(self, post_id: int) -> int:
        """Drop every upvote on a post that is being deleted."""
        return self.upvotes.delete_all_for_post(post_id)
