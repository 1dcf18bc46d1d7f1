"""Persistence for like and subscription edges.

Pure storage operations: no validation of subjects or actors happens here.
Uniqueness is enforced by the database constraints declared on the edge
models; a duplicate create surfaces as ``Conflict``.
"""

from collections import namedtuple
from enum import Enum
from typing import Dict, Iterable, Set
from uuid import UUID
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from videohub.database import store_operation
from videohub.exceptions import Conflict
from videohub.models.engagement_models import Like, Subscription


class EdgeKind(str, Enum):
    """Kinds of edge the store understands."""
    VIDEO_LIKE = "video_like"
    COMMENT_LIKE = "comment_like"
    TWEET_LIKE = "tweet_like"
    SUBSCRIPTION = "subscription"


EdgeColumns = namedtuple("EdgeColumns", ["model", "subject", "actor", "subject_attr", "actor_attr"])

EDGE_COLUMNS = {
    EdgeKind.VIDEO_LIKE: EdgeColumns(Like, Like.video_id, Like.liked_by_id, "video_id", "liked_by_id"),
    EdgeKind.COMMENT_LIKE: EdgeColumns(Like, Like.comment_id, Like.liked_by_id, "comment_id", "liked_by_id"),
    EdgeKind.TWEET_LIKE: EdgeColumns(Like, Like.tweet_id, Like.liked_by_id, "tweet_id", "liked_by_id"),
    EdgeKind.SUBSCRIPTION: EdgeColumns(
        Subscription, Subscription.channel_id, Subscription.subscriber_id, "channel_id", "subscriber_id"
    ),
}


class RelationshipStore:
    """Create, delete and count edges keyed by (subject, actor)."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def columns(kind: EdgeKind) -> EdgeColumns:
        return EDGE_COLUMNS[EdgeKind(kind)]

    def _by_key(self, kind: EdgeKind, subject_id: UUID, actor_id: UUID):
        cols = self.columns(kind)
        return self.db.query(cols.model).filter(cols.subject == subject_id, cols.actor == actor_id)

    def _edge_present(self, kind: EdgeKind, subject_id: UUID, actor_id: UUID) -> bool:
        return self.db.query(self._by_key(kind, subject_id, actor_id).exists()).scalar()

    @store_operation
    def exists(self, kind: EdgeKind, subject_id: UUID, actor_id: UUID) -> bool:
        """Whether an edge exists for (subject, actor)."""
        return self._edge_present(kind, subject_id, actor_id)

    @store_operation
    def create(self, kind: EdgeKind, subject_id: UUID, actor_id: UUID) -> UUID:
        """
        Insert a new edge and commit.

        Returns:
            The new edge id

        Raises:
            Conflict: An edge for (subject, actor) already exists
            IntegrityError: Any other constraint failure (missing subject, bad key)
        """
        cols = self.columns(kind)
        edge_id = uuid.uuid4()
        edge = cols.model(id=edge_id, **{cols.subject_attr: subject_id, cols.actor_attr: actor_id})

        self.db.add(edge)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # Only a duplicate key is a toggle race; other constraint failures propagate
            if not self._edge_present(kind, subject_id, actor_id):
                raise
            raise Conflict(f"{EdgeKind(kind).value} edge already exists for ({subject_id}, {actor_id})") from e

        return edge_id

    @store_operation
    def delete_by_key(self, kind: EdgeKind, subject_id: UUID, actor_id: UUID) -> int:
        """Delete the edge for (subject, actor). Deleting nothing is not an error."""
        deleted = self._by_key(kind, subject_id, actor_id).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    @store_operation
    def count_by_subject(self, kind: EdgeKind, subject_id: UUID) -> int:
        """Number of edges pointing at a subject."""
        cols = self.columns(kind)
        return self.db.query(func.count()).select_from(cols.model).filter(cols.subject == subject_id).scalar() or 0

    @store_operation
    def count_by_subjects(self, kind: EdgeKind, subject_ids: Iterable[UUID]) -> Dict[UUID, int]:
        """
        Edge counts for several subjects in one query.

        Subjects without edges map to 0.
        """
        subject_ids = list(subject_ids)
        counts = {subject_id: 0 for subject_id in subject_ids}
        if not subject_ids:
            return counts

        cols = self.columns(kind)
        rows = (
            self.db.query(cols.subject, func.count())
            .filter(cols.subject.in_(subject_ids))
            .group_by(cols.subject)
            .all()
        )
        for subject_id, count in rows:
            counts[subject_id] = count

        return counts

    @store_operation
    def count_by_actor(self, kind: EdgeKind, actor_id: UUID) -> int:
        """Number of edges created by an actor of the given kind."""
        cols = self.columns(kind)
        return (
            self.db.query(func.count())
            .select_from(cols.model)
            .filter(cols.actor == actor_id, cols.subject.isnot(None))
            .scalar()
        ) or 0

    @store_operation
    def subjects_with_actor(self, kind: EdgeKind, subject_ids: Iterable[UUID], actor_id: UUID) -> Set[UUID]:
        """Which of ``subject_ids`` the actor has an edge to (batched ``exists``)."""
        subject_ids = list(subject_ids)
        if not subject_ids or actor_id is None:
            return set()

        cols = self.columns(kind)
        rows = self.db.query(cols.subject).filter(cols.subject.in_(subject_ids), cols.actor == actor_id).all()
        return {row[0] for row in rows}

    def delete_all_for_subject(self, kind: EdgeKind, subject_id: UUID) -> int:
        """Cascade helper: remove every edge pointing at one subject."""
        return self.delete_all_for_subjects(kind, [subject_id])

    @store_operation
    def delete_all_for_subjects(self, kind: EdgeKind, subject_ids: Iterable[UUID], commit: bool = True) -> int:
        """
        Cascade helper: remove every edge pointing at any of the subjects.

        Idempotent; pass ``commit=False`` to fold the delete into a larger
        transaction owned by the caller.
        """
        subject_ids = list(subject_ids)
        if not subject_ids:
            return 0

        cols = self.columns(kind)
        deleted = (
            self.db.query(cols.model)
            .filter(cols.subject.in_(subject_ids))
            .delete(synchronize_session=False)
        )
        if commit:
            self.db.commit()

        return deleted
