"""Edge models: likes and subscriptions.

Edges are only ever created or deleted, never updated. The unique
constraints below are what keeps concurrent toggles from producing
duplicate edges.
"""

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from videohub.database import Base


class Like(Base):
    """A user liking exactly one video, comment or tweet."""
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("video_id", "liked_by_id", name="uq_likes_video_liked_by"),
        UniqueConstraint("comment_id", "liked_by_id", name="uq_likes_comment_liked_by"),
        UniqueConstraint("tweet_id", "liked_by_id", name="uq_likes_tweet_liked_by"),
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_likes_single_subject"
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Subject (exactly one is set)
    video_id = Column(Uuid(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id = Column(Uuid(as_uuid=True), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    tweet_id = Column(Uuid(as_uuid=True), ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True, index=True)

    # Actor
    liked_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    liked_by = relationship("User")

    def __repr__(self):
        subject = self.video_id or self.comment_id or self.tweet_id
        return f"<Like(subject={subject}, liked_by={self.liked_by_id})>"


class Subscription(Base):
    """A subscriber following a channel (both are users)."""
    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("channel_id", "subscriber_id", name="uq_subscriptions_channel_subscriber"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    channel_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subscriber_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    channel = relationship("User", foreign_keys=[channel_id])
    subscriber = relationship("User", foreign_keys=[subscriber_id])

    def __repr__(self):
        return f"<Subscription(channel={self.channel_id}, subscriber={self.subscriber_id})>"
