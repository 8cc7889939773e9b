# mypy: ignore-errors
# tests/test_post_store.py
"""Tests for creating, editing and accepting posts."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql

from quorum.core.errors import NotFoundError, UnauthorizedError, ValidationError
from quorum.models import Post, PostKind, QuestionFollowing, Tag
from quorum.repositories.post_repo import lock_statement
from quorum.services import VoteLedger


def test_create_question(store, db_session) -> None:
    question = store.create_question("alice", "  Why Go?  ", "Curious about the runtime.", ["go", "perf"])

    assert question.kind == PostKind.QUESTION
    assert question.title == "Why Go?"
    assert question.reply_count == 0
    assert question.vote_count == 0
    assert question.is_accepted is False
    assert question.tag_names == ["go", "perf"]
    assert len(set(question.tag_ids)) == 2


def test_create_question_collapses_duplicate_tags(store) -> None:
    question = store.create_question("alice", "Title", "Body", ["go", "go", " go "])

    assert question.tag_names == ["go"]


def test_create_question_requires_author(store) -> None:
    with pytest.raises(UnauthorizedError):
        store.create_question(None, "Title", "Body", [])


def test_create_question_requires_title(store) -> None:
    with pytest.raises(ValidationError):
        store.create_question("alice", None, "Body", [])


@pytest.mark.parametrize(
    ("title", "message"),
    [
        ("", "Body"),
        ("   ", "Body"),
        ("x" * 121, "Body"),
        ("Title", ""),
        ("Title", "y" * 1001),
    ],
)
def test_create_question_length_limits(store, db_session, title, message) -> None:
    with pytest.raises(ValidationError):
        store.create_question("alice", title, message, ["go"])

    assert db_session.scalar(select(func.count()).select_from(Post)) == 0
    # Tags resolved before the failure were rolled back as well.
    assert db_session.scalar(select(func.count()).select_from(Tag)) == 0


def test_create_question_tag_limit(store, test_settings) -> None:
    tags = [f"tag{i}" for i in range(test_settings.max_question_tags + 1)]

    with pytest.raises(ValidationError):
        store.create_question("alice", "Title", "Body", tags)


def test_create_answer_bumps_reply_count(store, make_question) -> None:
    question = make_question()

    answer = store.create_answer("bob", question.id, "Use reversed().")

    assert answer.kind == PostKind.ANSWER
    assert answer.parent_id == question.id
    assert answer.reply_count == 0
    assert question.reply_count == 1


def test_create_answer_on_missing_question(store) -> None:
    with pytest.raises(NotFoundError):
        store.create_answer("bob", 404, "Hello?")


def test_create_answer_on_answer_is_rejected(store, make_question) -> None:
    question = make_question()
    answer = store.create_answer("bob", question.id, "First")

    with pytest.raises(NotFoundError):
        store.create_answer("carol", answer.id, "Nested")
    assert answer.reply_count == 0


def test_create_answer_rejects_anonymous(store, make_question) -> None:
    question = make_question()

    with pytest.raises(UnauthorizedError):
        store.create_answer("", question.id, "Hi")
    assert question.reply_count == 0


def test_top_level_code_comment(store, make_code) -> None:
    code = make_code()

    comment = store.create_code_comment("bob", code.id, None, "Nice snippet")

    assert comment.kind == PostKind.CODE_COMMENT
    assert comment.content_id == code.id
    assert comment.parent_id is None
    assert code.comment_count == 1


def test_nested_code_comment_bumps_both_counters(store, make_code) -> None:
    code = make_code()
    root = store.create_code_comment("bob", code.id, None, "Root")

    reply = store.create_code_comment("carol", code.id, root.id, "Reply")

    assert reply.parent_id == root.id
    assert root.reply_count == 1
    assert code.comment_count == 2


def test_code_comment_parent_must_share_code(store, make_code) -> None:
    first, second = make_code(), make_code()
    root = store.create_code_comment("bob", first.id, None, "Root")

    with pytest.raises(ValidationError):
        store.create_code_comment("carol", second.id, root.id, "Wrong thread")
    assert second.comment_count == 0
    assert root.reply_count == 0


def test_code_comment_on_missing_code(store) -> None:
    with pytest.raises(NotFoundError):
        store.create_code_comment("bob", 404, None, "Hello")


def test_code_comment_missing_parent(store, make_code) -> None:
    code = make_code()

    with pytest.raises(NotFoundError):
        store.create_code_comment("bob", code.id, 404, "Hello")
    assert code.comment_count == 0


def test_edit_question_replaces_tags(store, make_question) -> None:
    question = make_question(tags=["python", "lists"])

    edited = store.edit_question("alice", question.id, "New title", "New body", ["lists", "idioms"])

    assert edited.title == "New title"
    assert edited.message == "New body"
    assert edited.tag_names == ["lists", "idioms"]


def test_edit_question_by_other_user(store, make_question) -> None:
    question = make_question()

    with pytest.raises(UnauthorizedError):
        store.edit_question("bob", question.id, "Hijacked", "Body", [])
    assert question.title == "How do I reverse a list?"


def test_edit_missing_question(store) -> None:
    with pytest.raises(NotFoundError):
        store.edit_question("alice", 404, "Title", "Body", [])


def test_edit_reply(store, make_question) -> None:
    question = make_question()
    answer = store.create_answer("bob", question.id, "Draft")

    edited = store.edit_reply("bob", answer.id, "  Final  ")

    assert edited.message == "Final"


def test_edit_reply_checks_kind_and_author(store, make_question) -> None:
    question = make_question()
    answer = store.create_answer("bob", question.id, "Draft")

    with pytest.raises(NotFoundError):
        store.edit_reply("alice", question.id, "Not an answer")
    with pytest.raises(UnauthorizedError):
        store.edit_reply("alice", answer.id, "Not mine")
    with pytest.raises(NotFoundError):
        store.edit_reply("bob", answer.id, "Wrong kind", kind=PostKind.CODE_COMMENT)
    with pytest.raises(ValidationError):
        store.edit_reply("bob", answer.id, "Question", kind=PostKind.QUESTION)


def test_accepting_answers_keeps_single_accepted(store, make_question) -> None:
    question = make_question()
    first = store.create_answer("bob", question.id, "First")
    second = store.create_answer("carol", question.id, "Second")

    store.set_accepted(first.id, True)
    assert (first.is_accepted, second.is_accepted, question.is_accepted) == (True, False, True)

    store.set_accepted(second.id, True)
    assert (first.is_accepted, second.is_accepted, question.is_accepted) == (False, True, True)

    store.set_accepted(second.id, False)
    assert (first.is_accepted, second.is_accepted, question.is_accepted) == (False, False, False)


def test_unaccepting_non_accepted_answer_keeps_question_flag(store, make_question) -> None:
    question = make_question()
    first = store.create_answer("bob", question.id, "First")
    second = store.create_answer("carol", question.id, "Second")
    store.set_accepted(first.id, True)

    store.set_accepted(second.id, False)

    assert first.is_accepted is True
    assert question.is_accepted is True


def test_accept_checks_owner(store, make_question) -> None:
    question = make_question(author_id="alice")
    answer = store.create_answer("bob", question.id, "Answer")

    with pytest.raises(UnauthorizedError):
        store.set_accepted(answer.id, True, user_id="bob")
    assert store.set_accepted(answer.id, True, user_id="alice") is True


def test_accept_rejects_questions_and_missing_posts(store, make_question) -> None:
    question = make_question()

    with pytest.raises(ValidationError):
        store.set_accepted(question.id, True)
    with pytest.raises(NotFoundError):
        store.set_accepted(404, True)
    with pytest.raises(ValidationError):
        store.set_accepted(question.id, "yes")


def test_accept_nested_code_comment(store, make_code) -> None:
    code = make_code(author_id="alice")
    root = store.create_code_comment("bob", code.id, None, "Root")
    first = store.create_code_comment("carol", code.id, root.id, "First")
    second = store.create_code_comment("dave", code.id, root.id, "Second")

    store.set_accepted(first.id, True, user_id="alice")
    store.set_accepted(second.id, True, user_id="alice")

    assert (first.is_accepted, second.is_accepted, root.is_accepted) == (False, True, True)


def test_top_level_code_comments_cannot_be_accepted(store, make_code) -> None:
    """Top-level comments have no thread root, so there is nothing to accept them in."""
    code = make_code(author_id=None)
    first = store.create_code_comment("bob", code.id, None, "First")

    with pytest.raises(NotFoundError):
        store.set_accepted(first.id, True, user_id="anyone")
    assert first.is_accepted is False


def test_accepting_reply_leaves_other_roots_alone(store, make_code) -> None:
    code = make_code(author_id="alice")
    r1 = store.create_code_comment("bob", code.id, None, "R1")
    r2 = store.create_code_comment("carol", code.id, None, "R2")
    reply = store.create_code_comment("dave", code.id, r2.id, "Under R2")

    with pytest.raises(NotFoundError):
        store.set_accepted(r1.id, True, user_id="alice")
    store.set_accepted(reply.id, True, user_id="alice")

    assert (r1.is_accepted, r2.is_accepted, reply.is_accepted) == (False, True, True)


def test_unaccepting_non_accepted_comment_keeps_root_flag(store, make_code) -> None:
    code = make_code(author_id="alice")
    root = store.create_code_comment("bob", code.id, None, "Root")
    first = store.create_code_comment("carol", code.id, root.id, "First")
    second = store.create_code_comment("dave", code.id, root.id, "Second")
    store.set_accepted(first.id, True, user_id="alice")

    store.set_accepted(second.id, False, user_id="alice")

    assert (first.is_accepted, second.is_accepted, root.is_accepted) == (True, False, True)


def test_accept_reply_with_missing_parent(store, db_session, make_code) -> None:
    code = make_code(author_id=None)
    stray = Post(
        kind=PostKind.CODE_COMMENT,
        author_id="bob",
        content_id=code.id,
        parent_id=999,
        message="Stray",
    )
    db_session.add(stray)
    db_session.commit()

    with pytest.raises(NotFoundError):
        store.set_accepted(stray.id, True)
    assert db_session.get(Post, stray.id).is_accepted is False


def test_root_lock_statement_selects_for_update() -> None:
    sql = str(lock_statement(7).compile(dialect=postgresql.dialect()))

    assert "FOR UPDATE" in sql


def test_follow_and_unfollow(store, db_session, make_question) -> None:
    question = make_question()

    assert store.follow_question("bob", question.id) is True
    assert store.follow_question("bob", question.id) is False
    assert db_session.get(QuestionFollowing, (question.id, "bob")) is not None

    assert store.unfollow_question("bob", question.id) is True
    assert store.unfollow_question("bob", question.id) is False


def test_follow_missing_question(store) -> None:
    with pytest.raises(NotFoundError):
        store.follow_question("bob", 404)


def test_why_go_scenario(store, db_session, make_question) -> None:
    """Walk through create, answer, vote, accept and delete end to end."""
    question = make_question(title="Why Go?", tags=["go", "perf"])
    assert len(question.tag_ids) == 2
    assert question.reply_count == 0

    answer = store.create_answer("bob", question.id, "Goroutines.")
    assert question.reply_count == 1

    ledger = VoteLedger(db_session)
    ledger.set_vote("alice", answer.id, 1)
    ledger.set_vote("alice", answer.id, 1)
    assert answer.vote_count == 1

    store.set_accepted(answer.id, True)
    second = store.create_answer("carol", question.id, "Fast builds.")
    store.set_accepted(second.id, True)
    assert answer.is_accepted is False
    assert second.is_accepted is True

    store.follow_question("dave", question.id)
    answer_ids = (answer.id, second.id)
    store.delete_question("alice", question.id)

    assert db_session.scalar(select(func.count()).select_from(Post)) == 0
    assert not ledger.voted_post_ids("alice", answer_ids)
    assert db_session.scalar(select(func.count()).select_from(QuestionFollowing)) == 0
