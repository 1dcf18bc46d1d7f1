"""Owner-checked mutations on videos, comments and tweets."""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from videohub.exceptions import Forbidden, InvalidArgument, NotFound
from videohub.models.content_models import Video, Comment, Tweet
from videohub.services.entity_store import EntityStore, EntityKind
from videohub.services.logging_service import app_logger as logger
from videohub.utils.validators import require_content


class ContentService:
    """
    Create, edit and delete content on behalf of a user.

    Media files are uploaded elsewhere; this service only stores the
    resulting URLs.
    """

    def __init__(self, db: Session):
        self.db = db
        self.entities = EntityStore(db)

    def _owned(self, kind: EntityKind, entity_id: UUID, actor_id: UUID):
        entity = self.entities.get_by_id(kind, entity_id)
        if entity.owner_id != actor_id:
            raise Forbidden(f"Only the owner can modify this {EntityKind(kind).value}")
        return entity

    # ============================================
    # Videos
    # ============================================

    def publish_video(
        self,
        owner_id: UUID,
        title: str,
        description: str,
        video_file: str,
        thumbnail: str,
        duration: float = 0.0
    ) -> Video:
        """
        Store a new published video.

        Raises:
            InvalidArgument: Missing title, description or media reference
        """
        title = require_content(title, "Title", max_length=255)
        description = require_content(description, "Description")
        if not video_file or not video_file.strip():
            raise InvalidArgument("Video file is required")
        if not thumbnail or not thumbnail.strip():
            raise InvalidArgument("Thumbnail is required")

        self.entities.get_by_id(EntityKind.CHANNEL, owner_id)

        video = self.entities.create(
            EntityKind.VIDEO,
            owner_id=owner_id,
            title=title,
            description=description,
            video_file=video_file.strip(),
            thumbnail=thumbnail.strip(),
            duration=duration or 0.0,
            is_published=True
        )
        logger.info("Video published", video_id=str(video.id), owner_id=str(owner_id))
        return video

    def update_video(
        self,
        video_id: UUID,
        actor_id: UUID,
        title: str,
        description: str,
        thumbnail: Optional[str] = None
    ) -> Video:
        """Edit title, description and optionally the thumbnail."""
        fields = {
            "title": require_content(title, "Title", max_length=255),
            "description": require_content(description, "Description"),
        }
        if thumbnail is not None:
            if not thumbnail.strip():
                raise InvalidArgument("Thumbnail can't be empty")
            fields["thumbnail"] = thumbnail.strip()

        video = self._owned(EntityKind.VIDEO, video_id, actor_id)
        return self.entities.update(video, **fields)

    def toggle_publish_status(self, video_id: UUID, actor_id: UUID) -> Video:
        """Flip a video between published and unpublished."""
        video = self._owned(EntityKind.VIDEO, video_id, actor_id)
        video = self.entities.update(video, is_published=not video.is_published)
        logger.info("Video publish status changed", video_id=str(video_id), is_published=video.is_published)
        return video

    def delete_video(self, video_id: UUID, actor_id: UUID) -> None:
        """Delete a video with its comments, likes and watch history."""
        self._owned(EntityKind.VIDEO, video_id, actor_id)
        self.entities.delete_video(video_id)

    # ============================================
    # Comments
    # ============================================

    def add_comment(self, video_id: UUID, actor_id: UUID, content: str) -> Comment:
        """
        Comment on a video.

        Raises:
            InvalidArgument: Empty content
            NotFound: Video missing, or unpublished and not the actor's
        """
        content = require_content(content, "Content")
        video = self.entities.get_by_id(EntityKind.VIDEO, video_id)
        if not video.is_published and video.owner_id != actor_id:
            raise NotFound(f"Video {video_id} not found")

        return self.entities.create(EntityKind.COMMENT, video_id=video_id, owner_id=actor_id, content=content)

    def update_comment(self, comment_id: UUID, actor_id: UUID, content: str) -> Comment:
        content = require_content(content, "Content")
        comment = self._owned(EntityKind.COMMENT, comment_id, actor_id)
        return self.entities.update(comment, content=content)

    def delete_comment(self, comment_id: UUID, actor_id: UUID) -> None:
        self._owned(EntityKind.COMMENT, comment_id, actor_id)
        self.entities.delete_comment(comment_id)

    # ============================================
    # Tweets
    # ============================================

    def create_tweet(self, owner_id: UUID, content: str) -> Tweet:
        content = require_content(content, "Content")
        self.entities.get_by_id(EntityKind.CHANNEL, owner_id)
        return self.entities.create(EntityKind.TWEET, owner_id=owner_id, content=content)

    def update_tweet(self, tweet_id: UUID, actor_id: UUID, content: str) -> Tweet:
        content = require_content(content, "Content")
        tweet = self._owned(EntityKind.TWEET, tweet_id, actor_id)
        return self.entities.update(tweet, content=content)

    def delete_tweet(self, tweet_id: UUID, actor_id: UUID) -> None:
        self._owned(EntityKind.TWEET, tweet_id, actor_id)
        self.entities.delete_tweet(tweet_id)
