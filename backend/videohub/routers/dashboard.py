"""Channel owner dashboard and public channel profiles."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from videohub.analytics.channel_stats import ChannelStatsReducer
from videohub.analytics.feed_assembler import FeedAssembler, FeedFilter, SortSpec
from videohub.analytics.projection_builder import ProjectionBuilder
from videohub.database import get_db
from videohub.middleware.auth import get_current_user, get_optional_viewer
from videohub.models.user import User
from videohub.models.content_schemas import VideoView
from videohub.models.schemas import ChannelStats, ChannelView, PagedResult
from videohub.services.entity_store import EntityKind
from videohub.utils.validators import parse_id

router = APIRouter()


@router.get("/dashboard/stats", response_model=ChannelStats)
async def get_channel_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Subscriber, video, view and like totals for the current user's channel."""
    return ChannelStatsReducer(db).channel_stats(current_user.id)


@router.get("/dashboard/videos", response_model=PagedResult[VideoView])
async def get_channel_videos(
    sort_by: str = "created_at",
    sort_type: str = "desc",
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="limit"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All of the current user's videos, unpublished ones included."""
    return FeedAssembler(db).assemble(
        FeedFilter(kind=EntityKind.VIDEO, owner_id=current_user.id),
        SortSpec(field=sort_by, direction=sort_type),
        page=page,
        page_size=page_size,
        viewer_id=current_user.id
    )


@router.get("/channels/{channel_id}", response_model=ChannelView)
async def get_channel(
    channel_id: str,
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    db: Session = Depends(get_db)
):
    """Public channel profile with subscription counts."""
    return ProjectionBuilder(db).get_entity_view(EntityKind.CHANNEL, parse_id(channel_id, "channel_id"), viewer_id)
