"""Denormalized, viewer-relative projections of videos, comments, tweets and channels."""

from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from videohub.exceptions import DataIntegrityError, InvalidArgument, NotFound
from videohub.models.schemas import OwnerProfile, ChannelProfile, ChannelView
from videohub.models.content_schemas import VideoView, CommentView, TweetView
from videohub.services.entity_store import EntityStore, EntityKind
from videohub.services.error_tracking import report_integrity_fault
from videohub.services.logging_service import app_metrics
from videohub.services.relationship_store import RelationshipStore, EdgeKind


LIKE_EDGES = {
    EntityKind.VIDEO: EdgeKind.VIDEO_LIKE,
    EntityKind.COMMENT: EdgeKind.COMMENT_LIKE,
    EntityKind.TWEET: EdgeKind.TWEET_LIKE,
}


class ProjectionBuilder:
    """Build denormalized views for a viewer.

    Counts default to 0 and viewer-relative flags are False for anonymous
    viewers. Counts are read from the store on every call; nothing is
    cached across calls.
    """

    def __init__(self, db: Session):
        self.db = db
        self.edges = RelationshipStore(db)
        self.entities = EntityStore(db)

    def project(self, kind: EntityKind, entity, viewer_id: Optional[UUID], detail: bool = False):
        """Project a single entity."""
        return self.project_many(kind, [entity], viewer_id, detail=detail)[0]

    def project_many(
        self,
        kind: EntityKind,
        entities: Sequence,
        viewer_id: Optional[UUID],
        detail: bool = False
    ) -> List:
        """
        Project a page of entities of one kind.

        Edge counts and viewer flags are fetched in one batched query per
        edge kind rather than once per entity.

        Args:
            kind: Entity kind shared by every item
            entities: Loaded entities, in output order
            viewer_id: Viewer identity, None for anonymous
            detail: Embed subscription facts in the owner fragment

        Returns:
            Views in the same order as ``entities``

        Raises:
            DataIntegrityError: An entity's owner row is missing
        """
        kind = EntityKind(kind)
        if not entities:
            return []

        if kind == EntityKind.CHANNEL:
            return self._project_channels(entities, viewer_id)

        ids = [entity.id for entity in entities]
        like_edge = LIKE_EDGES[kind]
        likes = self.edges.count_by_subjects(like_edge, ids)
        liked = self.edges.subjects_with_actor(like_edge, ids, viewer_id) if viewer_id else set()
        owners = self._owner_profiles(kind, entities, viewer_id, detail)

        views = []
        for entity in entities:
            common = {
                "owner": owners[entity.owner_id],
                "likes_count": likes.get(entity.id, 0),
                "is_liked": entity.id in liked,
            }
            views.append(self._build(kind, entity, common))

        return views

    def _build(self, kind: EntityKind, entity, common: dict):
        if kind == EntityKind.VIDEO:
            return VideoView(
                id=entity.id,
                title=entity.title,
                description=entity.description,
                video_file=entity.video_file,
                thumbnail=entity.thumbnail,
                duration=entity.duration or 0.0,
                views=entity.views or 0,
                is_published=entity.is_published,
                created_at=entity.created_at,
                **common
            )

        if kind == EntityKind.COMMENT:
            return CommentView(
                id=entity.id,
                video_id=entity.video_id,
                content=entity.content,
                created_at=entity.created_at,
                **common
            )

        return TweetView(
            id=entity.id,
            content=entity.content,
            created_at=entity.created_at,
            **common
        )

    def _owner_profiles(self, kind: EntityKind, entities: Sequence, viewer_id: Optional[UUID], detail: bool) -> Dict:
        """Resolve owner fragments, failing loudly if any owner is missing."""
        owner_ids = {entity.owner_id for entity in entities}
        owners = self.entities.get_many(EntityKind.CHANNEL, owner_ids)

        missing = owner_ids - set(owners)
        if missing:
            orphan = next(entity for entity in entities if entity.owner_id in missing)
            error = DataIntegrityError(f"{kind.value.capitalize()} {orphan.id} references missing owner {orphan.owner_id}")
            app_metrics.increment_integrity_fault()
            report_integrity_fault(error, entity_kind=kind.value, entity_id=orphan.id, owner_id=orphan.owner_id)
            raise error

        if not detail:
            return {owner_id: OwnerProfile.model_validate(owner) for owner_id, owner in owners.items()}

        ids = list(owners)
        subscribers = self.edges.count_by_subjects(EdgeKind.SUBSCRIPTION, ids)
        subscribed = self.edges.subjects_with_actor(EdgeKind.SUBSCRIPTION, ids, viewer_id) if viewer_id else set()

        return {
            owner_id: ChannelProfile(
                id=owner.id,
                username=owner.username,
                full_name=owner.full_name,
                avatar_url=owner.avatar_url,
                subscribers_count=subscribers.get(owner_id, 0),
                is_subscribed=owner_id in subscribed,
            )
            for owner_id, owner in owners.items()
        }

    def _project_channels(self, users: Sequence, viewer_id: Optional[UUID]) -> List[ChannelView]:
        ids = [user.id for user in users]
        subscribers = self.edges.count_by_subjects(EdgeKind.SUBSCRIPTION, ids)
        subscribed = self.edges.subjects_with_actor(EdgeKind.SUBSCRIPTION, ids, viewer_id) if viewer_id else set()

        return [
            ChannelView(
                id=user.id,
                username=user.username,
                full_name=user.full_name,
                avatar_url=user.avatar_url,
                cover_image_url=user.cover_image_url,
                created_at=user.created_at,
                subscribers_count=subscribers.get(user.id, 0),
                subscribed_to_count=self.edges.count_by_actor(EdgeKind.SUBSCRIPTION, user.id),
                is_subscribed=user.id in subscribed,
            )
            for user in users
        ]

    def get_entity_view(self, kind: EntityKind, entity_id: UUID, viewer_id: Optional[UUID]):
        """
        Load one entity and project it in detail mode.

        Unpublished videos are only visible to their owner; anyone else
        gets NotFound.

        Raises:
            NotFound: Entity does not exist (or is hidden from this viewer)
        """
        try:
            kind = EntityKind(kind)
        except ValueError:
            raise InvalidArgument(f"Unknown entity kind: {kind}") from None

        entity = self.entities.get_by_id(kind, entity_id)

        if kind == EntityKind.VIDEO and not entity.is_published and entity.owner_id != viewer_id:
            raise NotFound(f"Video {entity_id} not found")

        return self.project(kind, entity, viewer_id, detail=True)
