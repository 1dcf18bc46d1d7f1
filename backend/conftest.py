"""
Pytest configuration and shared fixtures for VideoHub tests.
"""

import os

# Must be set before videohub.config builds its settings
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from typing import Callable, Dict, Generator
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import jwt

from videohub.main import app
from videohub.config import settings
from videohub.database import Base, get_db
from videohub.models import User, Video, Comment, Tweet
from videohub.services.logging_service import app_metrics


# Database setup
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(test_db: Session) -> TestClient:
    """
    Create a test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_metrics():
    """
    Zero the in-memory metrics between tests.
    """
    app_metrics.reset()
    yield
    app_metrics.reset()


# Factories
@pytest.fixture
def make_user(test_db: Session) -> Callable[..., User]:
    """
    Factory for users (channels).
    """
    def _make_user(username: str, **fields) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            full_name=fields.pop("full_name", username.title()),
            avatar_url=fields.pop("avatar_url", f"https://cdn.example.com/avatars/{username}.png"),
            created_at=fields.pop("created_at", BASE_TIME),
            **fields
        )
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_video(test_db: Session) -> Callable[..., Video]:
    """
    Factory for videos. ``minutes`` offsets created_at from a fixed base time.
    """
    def _make_video(owner: User, title: str = "Video", minutes: int = 0, **fields) -> Video:
        created_at = BASE_TIME + timedelta(minutes=minutes)
        video = Video(
            owner_id=owner.id,
            title=title,
            description=fields.pop("description", f"About {title}"),
            video_file=fields.pop("video_file", "https://cdn.example.com/videos/file.mp4"),
            thumbnail=fields.pop("thumbnail", "https://cdn.example.com/thumbs/file.png"),
            duration=fields.pop("duration", 60.0),
            views=fields.pop("views", 0),
            is_published=fields.pop("is_published", True),
            created_at=created_at,
            updated_at=created_at,
            **fields
        )
        test_db.add(video)
        test_db.commit()
        test_db.refresh(video)
        return video

    return _make_video


@pytest.fixture
def make_comment(test_db: Session) -> Callable[..., Comment]:
    """
    Factory for comments.
    """
    def _make_comment(video: Video, owner: User, content: str = "Nice video", minutes: int = 0) -> Comment:
        created_at = BASE_TIME + timedelta(minutes=minutes)
        comment = Comment(
            video_id=video.id,
            owner_id=owner.id,
            content=content,
            created_at=created_at,
            updated_at=created_at
        )
        test_db.add(comment)
        test_db.commit()
        test_db.refresh(comment)
        return comment

    return _make_comment


@pytest.fixture
def make_tweet(test_db: Session) -> Callable[..., Tweet]:
    """
    Factory for tweets.
    """
    def _make_tweet(owner: User, content: str = "Hello", minutes: int = 0) -> Tweet:
        created_at = BASE_TIME + timedelta(minutes=minutes)
        tweet = Tweet(owner_id=owner.id, content=content, created_at=created_at, updated_at=created_at)
        test_db.add(tweet)
        test_db.commit()
        test_db.refresh(tweet)
        return tweet

    return _make_tweet


# User fixtures
@pytest.fixture
def test_user(make_user) -> User:
    """
    Create a test user.
    """
    return make_user("alice")


@pytest.fixture
def test_user2(make_user) -> User:
    """
    Create a second test user for multi-user tests.
    """
    return make_user("bob")


@pytest.fixture
def test_video(make_video, test_user: User) -> Video:
    """
    A published video owned by test_user.
    """
    return make_video(test_user, title="Intro to toggles")


def make_auth_headers(user_id) -> Dict[str, str]:
    """
    Bearer headers for a token whose subject is ``user_id``.
    """
    token = jwt.encode(
        {"sub": str(user_id), "exp": datetime.utcnow() + timedelta(hours=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user: User) -> Dict[str, str]:
    """
    Create authentication headers with JWT token.
    """
    return make_auth_headers(test_user.id)


@pytest.fixture
def auth_headers2(test_user2: User) -> Dict[str, str]:
    """
    Authentication headers for the second test user.
    """
    return make_auth_headers(test_user2.id)
