"""Database connection and session management."""

from functools import wraps
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator

from videohub.config import settings
from videohub.exceptions import Unavailable


def _engine_options() -> dict:
    """Pool options for the configured backend (SQLite has no sized pool)."""
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Verify connections before using
    }


# Create database engine
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,  # Log SQL queries in debug mode
    **_engine_options()
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.

    Usage in FastAPI endpoints:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def store_operation(func):
    """
    Translate connectivity failures raised inside a store method into
    ``Unavailable``. Any other database error propagates unchanged.

    The wrapped method must belong to an object exposing ``self.db``.
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except OperationalError as e:
            self.db.rollback()
            raise Unavailable(f"Store unavailable during {func.__name__}") from e

    return wrapper


def init_db():
    """Initialize database - create all tables."""
    # Import all models here to ensure they're registered with Base
    from videohub.models import user, content_models, engagement_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
