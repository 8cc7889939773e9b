# src/quorum/api/v1/endpoints/discussion.py
"""Question, answer and code comment endpoints for the Quorum API."""

from fastapi import APIRouter, Query, status

from quorum.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from quorum.core.settings import settings
from quorum.models.post import Post, PostKind
from quorum.schemas.post import (
    AcceptResponse,
    AcceptToggle,
    AnswerCreate,
    CodeCommentCreate,
    CodeCommentListRequest,
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
from quorum.services import (
    PostPage,
    PostStore,
    QuestionListEngine,
    ReplyListEngine,
    TagResolver,
    VoteLedger,
)

router = APIRouter(prefix="/discussion", tags=["discussion"])


def to_question_out(post: Post, is_upvoted: bool = False) -> QuestionResponse:
    """Convert a Question row to its API schema."""
    return QuestionResponse(
        id=post.id,
        user_id=post.author_id,
        title=post.title or "",
        message=post.message,
        date=post.created_at,
        votes=post.vote_count,
        answers=post.reply_count,
        is_accepted=post.is_accepted,
        is_upvoted=is_upvoted,
        tags=post.tag_names,
    )


def to_reply_out(post: Post, is_upvoted: bool = False) -> ReplyResponse:
    """Convert an Answer or CodeComment row to its API schema."""
    return ReplyResponse(
        id=post.id,
        user_id=post.author_id,
        message=post.message,
        date=post.created_at,
        votes=post.vote_count,
        answers=post.reply_count,
        is_accepted=post.is_accepted,
        is_upvoted=is_upvoted,
        parent_id=post.parent_id,
        code_id=post.content_id,
    )


def _reply_page(page: PostPage) -> ReplyListResponse:
    return ReplyListResponse(
        count=page.total,
        posts=[to_reply_out(item.post, item.is_upvoted) for item in page.items],
    )


# ----------------------------------------------------------------------
# Reads
# ----------------------------------------------------------------------
@router.get("/", response_model=QuestionListResponse)
def list_questions(
    db: SessionDep,
    viewer_id: OptionalUserDep,
    filter: int = Query(1, description="1 recent, 2 unanswered, 3 mine, 4 my replies, 5 hot"),
    page: int = Query(1, ge=0),
    count: int = Query(20, ge=0, le=settings.max_page_size),
    search: str | None = Query(None, description="Title prefix or exact tag name"),
    profile_id: str | None = Query(None, alias="profileId"),
) -> QuestionListResponse:
    """List questions matching a filter and optional search query.

    The "mine" and "my replies" filters default to the caller when no
    ``profileId`` is given.
    """
    result = QuestionListEngine(db).list(
        filter,
        page,
        count,
        search_query=search,
        profile_user_id=profile_id or viewer_id,
        viewer_user_id=viewer_id,
    )
    return QuestionListResponse(
        count=result.total,
        questions=[to_question_out(item.post, item.is_upvoted) for item in result.items],
    )


@router.get("/tags", response_model=TagListResponse)
def suggest_tags(
    db: SessionDep,
    query: str = Query("", description="Tag name prefix"),
) -> TagListResponse:
    """Suggest existing tag names starting with ``query``."""
    return TagListResponse(tags=TagResolver(db).suggest(query))


@router.post("/code-comments/list", response_model=ReplyListResponse)
def list_code_comments(
    body: CodeCommentListRequest,
    db: SessionDep,
    viewer_id: OptionalUserDep,
) -> ReplyListResponse:
    """List top-level comments of a code snippet, or replies to one comment."""
    result = ReplyListEngine(db).list_code_comments(
        body.code_id,
        body.filter,
        body.page,
        body.count,
        parent_id=body.parent_id,
        viewer_user_id=viewer_id,
    )
    return _reply_page(result)


@router.get("/{question_id}", response_model=QuestionResponse)
def get_question(
    question_id: int,
    db: SessionDep,
    viewer_id: OptionalUserDep,
) -> QuestionResponse:
    question = PostStore(db).get_question(question_id)
    return to_question_out(question, VoteLedger(db).is_upvoted(viewer_id, question.id))


@router.get("/{question_id}/replies", response_model=ReplyListResponse)
def list_answers(
    question_id: int,
    db: SessionDep,
    viewer_id: OptionalUserDep,
    filter: int = Query(1, description="1 most popular, 2 oldest, 3 newest"),
    page: int = Query(1, ge=0),
    count: int = Query(20, ge=0, le=settings.max_page_size),
) -> ReplyListResponse:
    result = ReplyListEngine(db).list_answers(
        question_id, filter, page, count, viewer_user_id=viewer_id
    )
    return _reply_page(result)


# ----------------------------------------------------------------------
# Writes
# ----------------------------------------------------------------------
@router.post("/", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
def create_question(
    body: QuestionCreate,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> QuestionResponse:
    question = PostStore(db).create_question(user_id, body.title, body.message, body.tags)
    return to_question_out(question)


@router.post("/accept", response_model=AcceptResponse)
def toggle_accepted(
    body: AcceptToggle,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> AcceptResponse:
    """Mark or unmark an answer or code comment as accepted.

    Only the question author (or the code author, when the code has one) may
    toggle the flag.
    """
    accepted = PostStore(db).set_accepted(body.post_id, body.accepted, user_id=user_id)
    return AcceptResponse(accepted=accepted)


@router.post("/vote", response_model=VoteResponse)
def vote(
    body: VoteRequest,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Set the caller's upvote on a post to the requested state."""
    return VoteResponse(vote=VoteLedger(db).set_vote(user_id, body.post_id, body.vote))


@router.post(
    "/code-comments",
    response_model=ReplyResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_code_comment(
    body: CodeCommentCreate,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> ReplyResponse:
    comment = PostStore(db).create_code_comment(
        user_id, body.code_id, body.parent_id, body.message
    )
    return to_reply_out(comment)


@router.put("/code-comments/{comment_id}", response_model=ReplyResponse)
def edit_code_comment(
    comment_id: int,
    body: ReplyUpdate,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> ReplyResponse:
    comment = PostStore(db).edit_reply(
        user_id, comment_id, body.message, kind=PostKind.CODE_COMMENT
    )
    return to_reply_out(comment)


@router.delete("/code-comments/{comment_id}", response_model=SuccessResponse)
def delete_code_comment(
    comment_id: int,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> SuccessResponse:
    """Delete a code comment together with its replies."""
    PostStore(db).delete_reply(user_id, comment_id, kind=PostKind.CODE_COMMENT)
    return SuccessResponse()


@router.put("/replies/{reply_id}", response_model=ReplyResponse)
def edit_answer(
    reply_id: int,
    body: ReplyUpdate,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> ReplyResponse:
    answer = PostStore(db).edit_reply(user_id, reply_id, body.message)
    return to_reply_out(answer)


@router.delete("/replies/{reply_id}", response_model=SuccessResponse)
def delete_answer(
    reply_id: int,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> SuccessResponse:
    PostStore(db).delete_reply(user_id, reply_id)
    return SuccessResponse()


@router.put("/{question_id}", response_model=QuestionResponse)
def edit_question(
    question_id: int,
    body: QuestionUpdate,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> QuestionResponse:
    store = PostStore(db)
    question = store.edit_question(user_id, question_id, body.title, body.message, body.tags)
    return to_question_out(question, store.votes.is_upvoted(user_id, question.id))


@router.delete("/{question_id}", response_model=SuccessResponse)
def delete_question(
    question_id: int,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> SuccessResponse:
    """Delete a question with its answers, votes and followers."""
    PostStore(db).delete_question(user_id, question_id)
    return SuccessResponse()


@router.post(
    "/{question_id}/replies",
    response_model=ReplyResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_answer(
    question_id: int,
    body: AnswerCreate,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> ReplyResponse:
    answer = PostStore(db).create_answer(user_id, question_id, body.message)
    return to_reply_out(answer)


@router.post("/{question_id}/follow", response_model=SuccessResponse)
def follow_question(
    question_id: int,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> SuccessResponse:
    PostStore(db).follow_question(user_id, question_id)
    return SuccessResponse()


@router.delete("/{question_id}/follow", response_model=SuccessResponse)
def unfollow_question(
    question_id: int,
    user_id: CurrentUserDep,
    db: SessionDep,
) -> SuccessResponse:
    PostStore(db).unfollow_question(user_id, question_id)
    return SuccessResponse()
