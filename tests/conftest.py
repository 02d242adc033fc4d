# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from quote_stage.core.security import create_access_token  # noqa: E402
from quote_stage.db.session import Base  # noqa: E402
from quote_stage.db.session import get_db as app_get_session  # noqa: E402
from quote_stage.main import app as fastapi_app  # noqa: E402
from quote_stage.models import Quote, QuoteVote, User  # noqa: E402
from quote_stage.services.rate_limit import (  # noqa: E402
    SlidingWindowRateLimiter,
    WindowPolicy,
    get_quote_limiter,
    get_vote_limiter,
)
from quote_stage.services.signals import FeedRefreshNotifier, get_feed_notifier  # noqa: E402

TEST_DB_URL = "sqlite://"
BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

_USER_COUNTER = count(1)


class FakeClock:
    """Manually advanced time source for limiter tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier(FeedRefreshNotifier):
    """Notifier that keeps events in memory instead of calling out."""

    def __init__(self) -> None:
        super().__init__(webhook_url="")
        self.events: list[dict[str, object]] = []

    async def notify(self, action: str, quote_id: int) -> None:
        self.events.append(self.build_event(action, quote_id))


def generous_limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(origin_policy=WindowPolicy(10_000, 60))


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
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def quote_limiter() -> SlidingWindowRateLimiter:
    return generous_limiter()


@pytest.fixture()
def vote_limiter() -> SlidingWindowRateLimiter:
    return generous_limiter()


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    notifier: RecordingNotifier,
    quote_limiter: SlidingWindowRateLimiter,
    vote_limiter: SlidingWindowRateLimiter,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_feed_notifier] = lambda: notifier
    app.dependency_overrides[get_quote_limiter] = lambda: quote_limiter
    app.dependency_overrides[get_vote_limiter] = lambda: vote_limiter
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    def _make_user(name: str = "User", *, is_anonymous: bool = False) -> User:
        user = User(
            id=f"user-{next(_USER_COUNTER)}",
            name=name,
            is_anonymous=is_anonymous,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    return make_user("Other User")


@pytest.fixture()
def anonymous_user(make_user: Callable[..., User]) -> User:
    return make_user("Anonymous", is_anonymous=True)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def anonymous_auth_token(anonymous_user: User) -> dict[str, str]:
    return auth_headers(anonymous_user)


@pytest.fixture()
def make_quote(db_session: Session) -> Callable[..., Quote]:
    """Insert quotes with controlled creation times (one minute apart by default)."""
    minutes = count(0)

    def _make_quote(
        text: str = "Stay hungry, stay foolish.",
        author: str = "Steve Jobs",
        *,
        owner: User | None = None,
        likes: int = 0,
        created_at: datetime | None = None,
    ) -> Quote:
        quote = Quote(
            quote=text,
            author=author,
            likes=likes,
            user_id=owner.id if owner is not None else None,
            created_at=created_at or BASE_TIME + timedelta(minutes=next(minutes)),
        )
        db_session.add(quote)
        db_session.commit()
        return quote

    return _make_quote


@pytest.fixture()
def test_quote(make_quote: Callable[..., Quote], test_user: User) -> Quote:
    return make_quote(owner=test_user)


def stored_vote_sum(db: Session, quote_id: int) -> int:
    values = db.query(QuoteVote.value).filter(QuoteVote.quote_id == quote_id).all()
    return sum(value for (value,) in values)


def current_likes(db: Session, quote_id: int) -> int:
    db.expire_all()
    return db.get(Quote, quote_id).likes
