# src/quorum/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import (
    AcceptResponse,
    AcceptToggle,
    AnswerCreate,
    CodeCommentCreate,
    CodeCommentListRequest,
    PostResponse,
    QuestionCreate,
    QuestionListResponse,
    QuestionResponse,
    QuestionUpdate,
    ReplyListResponse,
    ReplyResponse,
    ReplyUpdate,
    SuccessResponse,
    TagListResponse,
    VoteRequest,
    VoteResponse,
)

__all__ = [
    "AcceptResponse", "AcceptToggle",
    "AnswerCreate", "ReplyUpdate",
    "CodeCommentCreate", "CodeCommentListRequest",
    "PostResponse", "QuestionResponse", "ReplyResponse",
    "QuestionCreate", "QuestionUpdate",
    "QuestionListResponse", "ReplyListResponse", "TagListResponse",
    "SuccessResponse",
    "VoteRequest", "VoteResponse",
]
