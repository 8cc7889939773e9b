# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from quorum.core.security import create_access_token
from quorum.core.settings import Settings
from quorum.db.session import Base, enable_sqlite_transactions
from quorum.db.session import get_db as app_get_session
from quorum.main import app as fastapi_app
from quorum.models import Code, Post
from quorum.services import PostStore

TEST_DB_URL = "sqlite://"

_CODE_TITLE_COUNTER = count(1)
_TEST_SETTINGS_INSTANCE = Settings()


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = enable_sqlite_transactions(
        create_engine(
            TEST_DB_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session whose commits only release savepoints of an outer transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Provide a Settings instance aligned with runtime configuration."""
    return _TEST_SETTINGS_INSTANCE


@pytest.fixture()
def store(db_session: Session) -> PostStore:
    return PostStore(db_session)


@pytest.fixture()
def make_code(db_session: Session) -> Callable[..., Code]:
    """Persist a code snippet that comments can attach to."""

    def _make(author_id: str | None = "alice") -> Code:
        code = Code(
            title=f"snippet {next(_CODE_TITLE_COUNTER)}",
            author_id=author_id,
            comment_count=0,
        )
        db_session.add(code)
        db_session.commit()
        return code

    return _make


@pytest.fixture()
def make_question(store: PostStore) -> Callable[..., Post]:
    def _make(
        author_id: str = "alice",
        title: str = "How do I reverse a list?",
        message: str = "I tried a loop but it feels clumsy.",
        tags: list[str] | None = None,
    ) -> Post:
        return store.create_question(author_id, title, message, tags if tags is not None else ["python"])

    return _make


def auth_headers_for(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    """Return authorization headers for the primary test user (``alice``)."""
    return auth_headers_for("alice")


@pytest.fixture()
def other_auth_headers() -> dict[str, str]:
    """Return authorization headers for a second user (``bob``)."""
    return auth_headers_for("bob")


@pytest.fixture()
def make_auth_headers() -> Callable[[str], dict[str, str]]:
    """Return a factory of authorization headers for arbitrary user ids."""
    return auth_headers_for
