"""SQLAlchemy models for the Quorum application."""

from .code import Code
from .following import QuestionFollowing
from .post import Post, PostKind, QuestionTag
from .tag import Tag
from .vote import Upvote

__all__ = [
    "Code",
    "QuestionFollowing",
    "Post", "PostKind", "QuestionTag",
    "Tag",
    "Upvote"
]
