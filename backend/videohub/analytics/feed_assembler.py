"""Paginated, sorted, denormalized feeds.

Every feed runs the same fixed pipeline:

1. optional free-text candidate search (ids from a search collaborator)
2. equality filters (owner, video, publication flag)
3. single-field sort with an ``id`` tie-break
4. 1-based pagination with a clamped page size
5. per-page projection
"""

import math
from typing import Dict, Optional, Union
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import case, or_
from sqlalchemy.orm import Query, Session

from videohub.analytics.projection_builder import ProjectionBuilder
from videohub.config import settings
from videohub.exceptions import Forbidden, InvalidArgument, NotFound
from videohub.models.content_models import Video, Comment, Tweet
from videohub.models.engagement_models import Like, Subscription
from videohub.models.schemas import PagedResult, UserProfile
from videohub.models.user import User
from videohub.services.entity_store import EntityStore, EntityKind
from videohub.services.search_service import SearchCollaborator, SqlTextSearch
from videohub.utils.validators import parse_positive_int


RELEVANCE = "relevance"

SORT_FIELDS: Dict[EntityKind, Dict[str, object]] = {
    EntityKind.VIDEO: {
        "created_at": Video.created_at,
        "updated_at": Video.updated_at,
        "views": Video.views,
        "duration": Video.duration,
        "title": Video.title,
    },
    EntityKind.COMMENT: {
        "created_at": Comment.created_at,
        "updated_at": Comment.updated_at,
    },
    EntityKind.TWEET: {
        "created_at": Tweet.created_at,
        "updated_at": Tweet.updated_at,
    },
}

# Field names as clients of the original API sent them
SORT_ALIASES = {"createdAt": "created_at", "updatedAt": "updated_at"}

SEARCH_FIELDS = {
    EntityKind.COMMENT: ["content"],
    EntityKind.TWEET: ["content"],
}


class FeedFilter(BaseModel):
    """Equality and search filters for a feed."""
    kind: EntityKind = EntityKind.VIDEO
    query: Optional[str] = None
    owner_id: Optional[UUID] = None
    video_id: Optional[UUID] = None
    is_published: Optional[bool] = None


class SortSpec(BaseModel):
    """Single sort key plus direction."""
    field: str = "created_at"
    direction: str = "desc"


class FeedAssembler:
    """Compose filter, sort, paginate and project over primary entities."""

    def __init__(
        self,
        db: Session,
        search: Optional[SearchCollaborator] = None,
        max_page_size: Optional[int] = None
    ):
        self.db = db
        self.search = search or SqlTextSearch(db)
        self.max_page_size = max_page_size or settings.FEED_MAX_PAGE_SIZE
        self.entities = EntityStore(db)
        self.projections = ProjectionBuilder(db)

    # ============================================
    # Primary entity feeds
    # ============================================

    def assemble(
        self,
        feed_filter: Optional[FeedFilter] = None,
        sort: Optional[SortSpec] = None,
        page: Union[int, str, None] = None,
        page_size: Union[int, str, None] = None,
        viewer_id: Optional[UUID] = None
    ) -> PagedResult:
        """
        Build one page of a video, comment or tweet feed.

        Args:
            feed_filter: Kind plus optional query / equality filters
            sort: Sort field and direction (default created_at desc)
            page: 1-based page number
            page_size: Items per page, clamped to the configured maximum
            viewer_id: Viewer identity, None for anonymous

        Returns:
            PagedResult of projected views

        Raises:
            InvalidArgument: Bad page, page size, sort field or direction
            NotFound: Filtered owner or video does not exist
            Forbidden: Non-owner asking for unpublished videos
        """
        feed_filter = feed_filter or FeedFilter()
        sort = sort or SortSpec()
        kind = EntityKind(feed_filter.kind)
        if kind not in SORT_FIELDS:
            raise InvalidArgument(f"Cannot build a feed of {kind.value}")

        page, page_size = self._parse_page(page, page_size)
        model = EntityStore.model_for(kind)
        query = self.db.query(model)

        # 1. Search candidates
        candidate_ids = None
        if feed_filter.query and feed_filter.query.strip():
            candidate_ids = self.search.search(kind, feed_filter.query, self._search_fields(kind))
            query = query.filter(model.id.in_(candidate_ids))

        # 2. Equality filters
        query = self._apply_filters(query, kind, feed_filter, viewer_id)

        # 3. Sort
        query = self._apply_sort(query, kind, sort, candidate_ids)

        # 4. Paginate
        rows, total_items, total_pages = self._paginate(query, page, page_size)

        # 5. Project
        items = self.projections.project_many(kind, rows, viewer_id)

        return PagedResult(
            items=items,
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages
        )

    def _search_fields(self, kind: EntityKind):
        if kind == EntityKind.VIDEO:
            return settings.video_search_fields_list
        return SEARCH_FIELDS[kind]

    def _apply_filters(self, query: Query, kind: EntityKind, feed_filter: FeedFilter, viewer_id: Optional[UUID]) -> Query:
        model = EntityStore.model_for(kind)

        if feed_filter.owner_id is not None:
            self.entities.get_by_id(EntityKind.CHANNEL, feed_filter.owner_id)
            query = query.filter(model.owner_id == feed_filter.owner_id)

        if kind == EntityKind.COMMENT and feed_filter.video_id is not None:
            video = self.entities.get_by_id(EntityKind.VIDEO, feed_filter.video_id)
            if not video.is_published and video.owner_id != viewer_id:
                raise NotFound(f"Video {feed_filter.video_id} not found")
            query = query.filter(Comment.video_id == feed_filter.video_id)

        if kind == EntityKind.VIDEO:
            viewer_is_owner = viewer_id is not None and feed_filter.owner_id == viewer_id
            if viewer_is_owner:
                if feed_filter.is_published is not None:
                    query = query.filter(Video.is_published.is_(feed_filter.is_published))
            elif feed_filter.is_published is False:
                raise Forbidden("Only the owner can list unpublished videos")
            else:
                query = query.filter(Video.is_published.is_(True))

        return query

    def _apply_sort(self, query: Query, kind: EntityKind, sort: SortSpec, candidate_ids) -> Query:
        model = EntityStore.model_for(kind)
        direction = (sort.direction or "desc").lower()
        if direction not in ("asc", "desc"):
            raise InvalidArgument(f"Invalid sort direction: {sort.direction}")

        field = SORT_ALIASES.get(sort.field, sort.field)

        if field == RELEVANCE:
            if candidate_ids is None:
                raise InvalidArgument("Relevance sort requires a search query")
            if not candidate_ids:
                return query.order_by(model.id)
            rank = case(
                *[(model.id == candidate_id, position) for position, candidate_id in enumerate(candidate_ids)],
                else_=len(candidate_ids)
            )
            # Collaborator order is best-first; direction does not apply
            return query.order_by(rank.asc(), model.id.asc())

        column = SORT_FIELDS[kind].get(field)
        if column is None:
            raise InvalidArgument(f"Cannot sort {kind.value} by {sort.field}")

        ordering = column.asc() if direction == "asc" else column.desc()
        # id tie-break keeps page boundaries stable when sort keys collide
        return query.order_by(ordering, model.id.asc())

    # ============================================
    # Edge-joined listings
    # ============================================

    def channel_subscribers(
        self,
        channel_id: UUID,
        page: Union[int, str, None] = None,
        page_size: Union[int, str, None] = None
    ) -> PagedResult:
        """Users subscribed to a channel, newest subscription first."""
        page, page_size = self._parse_page(page, page_size)
        self.entities.get_by_id(EntityKind.CHANNEL, channel_id)

        query = (
            self.db.query(User)
            .join(Subscription, Subscription.subscriber_id == User.id)
            .filter(Subscription.channel_id == channel_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.asc())
        )
        return self._user_page(query, page, page_size)

    def subscribed_channels(
        self,
        subscriber_id: UUID,
        page: Union[int, str, None] = None,
        page_size: Union[int, str, None] = None
    ) -> PagedResult:
        """Channels a user subscribes to, newest subscription first."""
        page, page_size = self._parse_page(page, page_size)
        self.entities.get_by_id(EntityKind.CHANNEL, subscriber_id)

        query = (
            self.db.query(User)
            .join(Subscription, Subscription.channel_id == User.id)
            .filter(Subscription.subscriber_id == subscriber_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.asc())
        )
        return self._user_page(query, page, page_size)

    def liked_videos(
        self,
        actor_id: UUID,
        page: Union[int, str, None] = None,
        page_size: Union[int, str, None] = None
    ) -> PagedResult:
        """
        Videos the actor liked, newest like first.

        Someone else's unpublished video drops out of the list until it is
        published again; the actor's own unpublished videos stay.
        """
        page, page_size = self._parse_page(page, page_size)

        query = (
            self.db.query(Video)
            .join(Like, Like.video_id == Video.id)
            .filter(
                Like.liked_by_id == actor_id,
                or_(Video.is_published.is_(True), Video.owner_id == actor_id)
            )
            .order_by(Like.created_at.desc(), Like.id.asc())
        )
        rows, total_items, total_pages = self._paginate(query, page, page_size)

        return PagedResult(
            items=self.projections.project_many(EntityKind.VIDEO, rows, actor_id),
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages
        )

    def _user_page(self, query: Query, page: int, page_size: int) -> PagedResult:
        rows, total_items, total_pages = self._paginate(query, page, page_size)
        return PagedResult(
            items=[UserProfile.model_validate(user) for user in rows],
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages
        )

    # ============================================
    # Pagination
    # ============================================

    def _parse_page(self, page, page_size):
        page = parse_positive_int(page, "page", 1)
        page_size = parse_positive_int(page_size, "page_size", settings.FEED_DEFAULT_PAGE_SIZE)
        return page, min(page_size, self.max_page_size)

    @staticmethod
    def _paginate(query: Query, page: int, page_size: int):
        """Return (rows, total_items, total_pages); pages past the end are empty."""
        total_items = query.order_by(None).count()
        total_pages = math.ceil(total_items / page_size) if total_items else 0

        if page > total_pages:
            return [], total_items, total_pages

        rows = query.offset((page - 1) * page_size).limit(page_size).all()
        return rows, total_items, total_pages
