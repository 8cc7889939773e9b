"""Discussion-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from quorum.core.settings import settings
from quorum.models.post import MESSAGE_MAX_LENGTH, TITLE_MAX_LENGTH


class QuestionCreate(BaseModel):
    """Schema for asking a new question."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)
    tags: list[str] = Field(
        ...,
        max_length=settings.max_question_tags,
        description="Tag names; missing tags are created",
    )


class QuestionUpdate(QuestionCreate):
    """Schema for editing a question; the tag set is replaced."""


class AnswerCreate(BaseModel):
    """Schema for answering a question."""

    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)


class ReplyUpdate(BaseModel):
    """Schema for editing the message of an answer or code comment."""

    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)


class CodeCommentCreate(BaseModel):
    """Schema for commenting on a code snippet."""

    code_id: int = Field(..., alias="codeId")
    parent_id: int | None = Field(None, alias="parentId", description="Comment being replied to")
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)

    model_config = ConfigDict(populate_by_name=True)


class CodeCommentListRequest(BaseModel):
    """Body of the code comment listing call."""

    code_id: int = Field(..., alias="codeId")
    parent_id: int | None = Field(None, alias="parentId")
    page: int = Field(..., ge=0)
    count: int = Field(..., ge=0, le=settings.max_page_size)
    filter: int = Field(..., ge=0)

    model_config = ConfigDict(populate_by_name=True)


class AcceptToggle(BaseModel):
    """Schema for marking or unmarking an accepted reply."""

    post_id: int = Field(..., alias="postId")
    accepted: bool

    model_config = ConfigDict(populate_by_name=True)


class VoteRequest(BaseModel):
    """Schema for setting the caller's vote on a post."""

    post_id: int = Field(..., alias="postId")
    vote: Literal[0, 1] = Field(..., description="1 to upvote, 0 to remove the upvote")

    model_config = ConfigDict(populate_by_name=True)


class VoteResponse(BaseModel):
    vote: Literal[0, 1]


class AcceptResponse(BaseModel):
    success: bool = True
    accepted: bool


class SuccessResponse(BaseModel):
    success: bool = True


class PostResponse(BaseModel):
    """Fields shared by every kind of post returned by the API."""

    id: int
    user_id: str
    message: str
    date: datetime
    votes: int
    answers: int
    is_accepted: bool
    is_upvoted: bool = False


class QuestionResponse(PostResponse):
    title: str
    tags: list[str] = Field(default_factory=list)


class ReplyResponse(PostResponse):
    parent_id: int | None = None
    code_id: int | None = None


class QuestionListResponse(BaseModel):
    count: int
    questions: list[QuestionResponse]


class ReplyListResponse(BaseModel):
    count: int
    posts: list[ReplyResponse]


class TagListResponse(BaseModel):
    tags: list[str]
