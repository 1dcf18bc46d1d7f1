"""SQL-backed entity store for users, videos, comments and tweets.

Deletes cascade to dependent edges and comments inside a single
transaction, and every cascade step is idempotent so a retried delete
after a dropped response is harmless.
"""

from enum import Enum
from typing import Dict, Iterable, List
from uuid import UUID

from sqlalchemy.orm import Session

from videohub.database import store_operation
from videohub.exceptions import NotFound
from videohub.models.user import User, WatchHistory
from videohub.models.content_models import Video, Comment, Tweet
from videohub.services.logging_service import app_logger as logger
from videohub.services.relationship_store import RelationshipStore, EdgeKind


class EntityKind(str, Enum):
    """Primary entity kinds."""
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"
    CHANNEL = "channel"


ENTITY_MODELS = {
    EntityKind.VIDEO: Video,
    EntityKind.COMMENT: Comment,
    EntityKind.TWEET: Tweet,
    EntityKind.CHANNEL: User,
}


class EntityStore:
    """Lookup and lifecycle operations over primary entities."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def model_for(kind: EntityKind):
        return ENTITY_MODELS[EntityKind(kind)]

    # ============================================
    # Reads
    # ============================================

    @store_operation
    def get_by_id(self, kind: EntityKind, entity_id: UUID):
        """
        Fetch one entity.

        Raises:
            NotFound: No entity of that kind has this id
        """
        entity = self.db.get(self.model_for(kind), entity_id)
        if entity is None:
            raise NotFound(f"{EntityKind(kind).value.capitalize()} {entity_id} not found")
        return entity

    @store_operation
    def get_many(self, kind: EntityKind, entity_ids: Iterable[UUID]) -> Dict[UUID, object]:
        """Fetch several entities by id; missing ids are simply absent from the result."""
        entity_ids = list(set(entity_ids))
        if not entity_ids:
            return {}

        model = self.model_for(kind)
        rows = self.db.query(model).filter(model.id.in_(entity_ids)).all()
        return {row.id: row for row in rows}

    @store_operation
    def list_by_owner(self, kind: EntityKind, owner_id: UUID, include_unpublished: bool = False) -> List:
        """All entities of a kind owned by a user, newest first."""
        model = self.model_for(kind)
        query = self.db.query(model).filter(model.owner_id == owner_id)

        if model is Video and not include_unpublished:
            query = query.filter(Video.is_published.is_(True))

        return query.order_by(model.created_at.desc(), model.id).all()

    # ============================================
    # View tracking
    # ============================================

    @store_operation
    def increment_view_count(self, video_id: UUID) -> None:
        """Atomically add one view to a video."""
        updated = (
            self.db.query(Video)
            .filter(Video.id == video_id)
            .update({Video.views: Video.views + 1}, synchronize_session=False)
        )
        self.db.commit()

        if not updated:
            raise NotFound(f"Video {video_id} not found")

    @store_operation
    def append_to_watch_history(self, user_id: UUID, video_id: UUID) -> bool:
        """
        Add a video to a user's watch history if it is not there yet.

        Returns:
            True if a new history row was written
        """
        already_watched = self.db.query(
            self.db.query(WatchHistory)
            .filter(WatchHistory.user_id == user_id, WatchHistory.video_id == video_id)
            .exists()
        ).scalar()
        if already_watched:
            return False

        self.db.add(WatchHistory(user_id=user_id, video_id=video_id))
        self.db.commit()
        return True

    # ============================================
    # Lifecycle
    # ============================================

    @store_operation
    def create(self, kind: EntityKind, **fields):
        """Insert a new entity and return it refreshed."""
        entity = self.model_for(kind)(**fields)
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    @store_operation
    def update(self, entity, **fields):
        """Apply field changes to a loaded entity and commit."""
        for name, value in fields.items():
            setattr(entity, name, value)

        self.db.commit()
        self.db.refresh(entity)
        return entity

    @store_operation
    def delete_video(self, video_id: UUID) -> None:
        """
        Delete a video and everything hanging off it: likes on the video,
        its comments, likes on those comments and watch-history rows.
        """
        edges = RelationshipStore(self.db)
        comment_ids = [row[0] for row in self.db.query(Comment.id).filter(Comment.video_id == video_id).all()]

        likes_removed = edges.delete_all_for_subjects(EdgeKind.VIDEO_LIKE, [video_id], commit=False)
        likes_removed += edges.delete_all_for_subjects(EdgeKind.COMMENT_LIKE, comment_ids, commit=False)
        self.db.query(Comment).filter(Comment.video_id == video_id).delete(synchronize_session=False)
        self.db.query(WatchHistory).filter(WatchHistory.video_id == video_id).delete(synchronize_session=False)
        self.db.query(Video).filter(Video.id == video_id).delete(synchronize_session=False)
        self.db.commit()

        logger.info(
            "Video deleted",
            video_id=str(video_id),
            comments_removed=len(comment_ids),
            likes_removed=likes_removed
        )

    @store_operation
    def delete_comment(self, comment_id: UUID) -> None:
        """Delete a comment and every like on it."""
        edges = RelationshipStore(self.db)
        likes_removed = edges.delete_all_for_subjects(EdgeKind.COMMENT_LIKE, [comment_id], commit=False)
        self.db.query(Comment).filter(Comment.id == comment_id).delete(synchronize_session=False)
        self.db.commit()

        logger.info("Comment deleted", comment_id=str(comment_id), likes_removed=likes_removed)

    @store_operation
    def delete_tweet(self, tweet_id: UUID) -> None:
        """Delete a tweet and every like on it."""
        edges = RelationshipStore(self.db)
        likes_removed = edges.delete_all_for_subjects(EdgeKind.TWEET_LIKE, [tweet_id], commit=False)
        self.db.query(Tweet).filter(Tweet.id == tweet_id).delete(synchronize_session=False)
        self.db.commit()

        logger.info("Tweet deleted", tweet_id=str(tweet_id), likes_removed=likes_removed)
