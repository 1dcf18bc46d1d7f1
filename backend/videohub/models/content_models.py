"""Primary content models: videos, comments and tweets."""

from sqlalchemy import Column, String, Text, Boolean, DateTime, Float, ForeignKey, BigInteger, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from videohub.database import Base


class Video(Base):
    """Uploaded video. Owner is fixed at creation."""
    __tablename__ = "videos"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Video content
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    # Media references (uploaded and stored externally)
    video_file = Column(String(500), nullable=False)
    thumbnail = Column(String(500), nullable=False)
    duration = Column(Float, default=0.0, nullable=False)  # Seconds

    # Engagement
    views = Column(BigInteger, default=0, nullable=False)
    is_published = Column(Boolean, default=True, nullable=False, index=True)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="videos")
    comments = relationship("Comment", back_populates="video")

    def __repr__(self):
        return f"<Video(id={self.id}, title='{self.title}', views={self.views})>"


class Comment(Base):
    """Comment on a video."""
    __tablename__ = "comments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(Uuid(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    video = relationship("Video", back_populates="comments")
    owner = relationship("User", back_populates="comments")

    def __repr__(self):
        return f"<Comment(id={self.id}, video_id={self.video_id})>"


class Tweet(Base):
    """Short text post by a channel owner."""
    __tablename__ = "tweets"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="tweets")

    def __repr__(self):
        return f"<Tweet(id={self.id}, owner_id={self.owner_id})>"
