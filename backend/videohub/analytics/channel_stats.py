"""Channel-level engagement rollups for the owner dashboard."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from videohub.database import store_operation
from videohub.models.content_models import Video
from videohub.models.engagement_models import Like
from videohub.models.schemas import ChannelStats
from videohub.services.entity_store import EntityStore, EntityKind
from videohub.services.relationship_store import RelationshipStore, EdgeKind


class ChannelStatsReducer:
    """Reduce a channel's edges and videos to four totals."""

    def __init__(self, db: Session):
        self.db = db
        self.edges = RelationshipStore(db)
        self.entities = EntityStore(db)

    @store_operation
    def channel_stats(self, channel_id: UUID) -> ChannelStats:
        """Compute dashboard totals for a channel.

        Each total is computed independently and is 0 when there is nothing
        to count. Unpublished videos are included: the dashboard belongs to
        the owner, who sees everything they uploaded.

        Args:
            channel_id: Channel (user) id

        Returns:
            ChannelStats with subscriber, video, view and like totals

        Raises:
            NotFound: Channel does not exist
        """
        self.entities.get_by_id(EntityKind.CHANNEL, channel_id)

        subscribers_count = self.edges.count_by_subject(EdgeKind.SUBSCRIPTION, channel_id)

        videos_count, views_count = (
            self.db.query(func.count(Video.id), func.coalesce(func.sum(Video.views), 0))
            .filter(Video.owner_id == channel_id)
            .one()
        )

        likes_count = (
            self.db.query(func.count(Like.id))
            .join(Video, Like.video_id == Video.id)
            .filter(Video.owner_id == channel_id)
            .scalar()
        )

        return ChannelStats(
            subscribers_count=subscribers_count or 0,
            videos_count=videos_count or 0,
            views_count=int(views_count or 0),
            likes_count=likes_count or 0
        )
