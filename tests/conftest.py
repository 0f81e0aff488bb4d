# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import datetime
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rewise.core.settings import Settings
from rewise.db.session import Base
from rewise.db.session import get_db as app_get_session
from rewise.main import create_app
from rewise.models import Lesson, User
from rewise.models.user import ROLE_ADMIN
from tests.factories import (
    ADMIN_EMAIL,
    OTHER_EMAIL,
    PREMIUM_EMAIL,
    TEST_IDENTITY_SECRET,
    TEST_PAYMENT_KEY,
    TEST_WEBHOOK_SECRET,
    USER_EMAIL,
    auth_headers,
)

TEST_DB_URL = "sqlite://"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def test_settings() -> Settings:
    """Settings wired for in-memory storage and locally minted tokens."""
    return Settings(
        DATABASE_URL=TEST_DB_URL,
        AUTO_CREATE_TABLES=False,
        IDENTITY_SHARED_SECRET=TEST_IDENTITY_SECRET,
        PAYMENT_SECRET_KEY=TEST_PAYMENT_KEY,
        PAYMENT_WEBHOOK_SECRET=TEST_WEBHOOK_SECRET,
        PAYMENT_API_BASE_URL="https://payments.test",
    )


@pytest.fixture()
def app(test_settings: Settings, db_session: Session) -> Iterator[FastAPI]:
    application = create_app(test_settings)

    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    application.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _make_user(db: Session, email: str, **fields: Any) -> User:
    user = User(email=email, name=fields.pop("name", email.split("@")[0].title()), **fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted regular user."""
    return _make_user(db_session, USER_EMAIL)


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second regular user."""
    return _make_user(db_session, OTHER_EMAIL)


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """Create and return an admin."""
    return _make_user(db_session, ADMIN_EMAIL, role=ROLE_ADMIN)


@pytest.fixture()
def premium_user(db_session: Session) -> User:
    """Create and return a user who has paid for premium."""
    return _make_user(db_session, PREMIUM_EMAIL, is_premium=True)


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user.email)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user.email)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user.email)


@pytest.fixture()
def premium_auth_token(premium_user: User) -> dict[str, str]:
    return auth_headers(premium_user.email)


@pytest.fixture()
def make_lesson(db_session: Session) -> Callable[..., Lesson]:
    """Return a factory persisting lessons with sensible defaults."""

    def _make_lesson(
        creator_email: str = USER_EMAIL,
        *,
        created_at: datetime | None = None,
        **fields: Any,
    ) -> Lesson:
        values: dict[str, Any] = {
            "title": "Patience pays",
            "body": "Waiting a day before answering angry mail saved a friendship.",
            "category": "relationships",
            "emotional_tag": "gratitude",
            "visibility": "public",
            "access_level": "free",
        }
        values.update(fields)
        lesson = Lesson(creator_email=creator_email, **values)
        if created_at is not None:
            lesson.created_at = created_at
        db_session.add(lesson)
        db_session.commit()
        db_session.refresh(lesson)
        return lesson

    return _make_lesson


@pytest.fixture()
def test_lesson(make_lesson: Callable[..., Lesson], test_user: User) -> Lesson:
    """A public free lesson authored by the primary test user."""
    return make_lesson(test_user.email)
