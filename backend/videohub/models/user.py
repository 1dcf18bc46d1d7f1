"""User (channel) model and watch history."""

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from videohub.database import Base


class User(Base):
    """User account; doubles as a channel others can subscribe to."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=True)
    full_name = Column(String(100))

    # Media references (stored externally)
    avatar_url = Column(String(500))
    cover_image_url = Column(String(500))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    videos = relationship("Video", back_populates="owner")
    tweets = relationship("Tweet", back_populates="owner")
    comments = relationship("Comment", back_populates="owner")
    watch_history = relationship("WatchHistory", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"


class WatchHistory(Base):
    """Videos a user has opened, at most one row per (user, video)."""

    __tablename__ = "watch_history"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Uuid(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    watched_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="watch_history")

    def __repr__(self):
        return f"<WatchHistory(user_id={self.user_id}, video_id={self.video_id})>"
