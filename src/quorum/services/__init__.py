"""Business logic services for the Quorum application."""

from .listing import AnnotatedPost, PostPage
from .post_store import PostStore
from .question_list import QuestionFilter, QuestionListEngine
from .reply_list import ReplyFilter, ReplyListEngine
from .tag_resolver import TagResolver
from .vote_ledger import VoteLedger

__all__ = [
    "AnnotatedPost",
    "PostPage",
    "PostStore",
    "QuestionFilter",
    "QuestionListEngine",
    "ReplyFilter",
    "ReplyListEngine",
    "TagResolver",
    "VoteLedger"
]
