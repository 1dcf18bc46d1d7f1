"""Idempotent like / subscription toggles.

The existence check and the create-or-delete that follows are not atomic.
When two callers both see "absent" and race to create, the unique
constraint rejects the second insert; that caller then deletes instead,
so both converge on a single consistent edge state after at most one retry.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from videohub.exceptions import Conflict, InvalidArgument
from videohub.models.schemas import ToggleState
from videohub.services.entity_store import EntityStore, EntityKind
from videohub.services.logging_service import app_logger as logger, app_metrics
from videohub.services.relationship_store import RelationshipStore, EdgeKind


# Subject entity kind each edge kind must point at
SUBJECT_KINDS = {
    EdgeKind.VIDEO_LIKE: EntityKind.VIDEO,
    EdgeKind.COMMENT_LIKE: EntityKind.COMMENT,
    EdgeKind.TWEET_LIKE: EntityKind.TWEET,
    EdgeKind.SUBSCRIPTION: EntityKind.CHANNEL,
}

LIKE_EDGE_KINDS = {
    EntityKind.VIDEO: EdgeKind.VIDEO_LIKE,
    EntityKind.COMMENT: EdgeKind.COMMENT_LIKE,
    EntityKind.TWEET: EdgeKind.TWEET_LIKE,
}


class ToggleEngine:
    """Create-or-remove edges keyed by (subject, actor)."""

    def __init__(self, db: Session):
        self.db = db
        self.edges = RelationshipStore(db)
        self.entities = EntityStore(db)

    def toggle(self, kind: EdgeKind, subject_id: UUID, actor_id: UUID) -> ToggleState:
        """
        Flip the edge between ``actor_id`` and ``subject_id``.

        Args:
            kind: Edge kind
            subject_id: Video, comment, tweet or channel id
            actor_id: User performing the toggle

        Returns:
            ToggleState.CREATED or ToggleState.REMOVED

        Raises:
            NotFound: Subject does not exist as the kind the edge requires
        """
        kind = EdgeKind(kind)
        self.entities.get_by_id(SUBJECT_KINDS[kind], subject_id)

        if self.edges.exists(kind, subject_id, actor_id):
            self.edges.delete_by_key(kind, subject_id, actor_id)
            return self._record(kind, subject_id, actor_id, ToggleState.REMOVED)

        try:
            self.edges.create(kind, subject_id, actor_id)
        except Conflict:
            # A concurrent caller created the edge after our existence check.
            app_metrics.increment_conflict()
            logger.info(
                "Toggle create raced; converting to delete",
                edge_kind=kind.value,
                subject_id=str(subject_id),
                actor_id=str(actor_id)
            )
            self.edges.delete_by_key(kind, subject_id, actor_id)
            return self._record(kind, subject_id, actor_id, ToggleState.REMOVED)

        return self._record(kind, subject_id, actor_id, ToggleState.CREATED)

    def _record(self, kind: EdgeKind, subject_id: UUID, actor_id: UUID, state: ToggleState) -> ToggleState:
        app_metrics.increment_toggle(kind.value, state.value)
        logger.debug("Edge toggled", edge_kind=kind.value, subject_id=str(subject_id),
                     actor_id=str(actor_id), state=state.value)
        return state

    def toggle_like(self, subject_kind: EntityKind, subject_id: UUID, actor_id: UUID) -> ToggleState:
        """Like or unlike a video, comment or tweet."""
        try:
            edge_kind = LIKE_EDGE_KINDS[EntityKind(subject_kind)]
        except (KeyError, ValueError):
            raise InvalidArgument(f"Cannot like a {subject_kind}") from None

        return self.toggle(edge_kind, subject_id, actor_id)

    def toggle_subscription(self, channel_id: UUID, subscriber_id: UUID) -> ToggleState:
        """Subscribe to or unsubscribe from a channel."""
        return self.toggle(EdgeKind.SUBSCRIPTION, channel_id, subscriber_id)
