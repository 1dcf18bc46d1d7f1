"""Video feed, detail and publishing endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from videohub.analytics.feed_assembler import FeedAssembler, FeedFilter, SortSpec
from videohub.analytics.projection_builder import ProjectionBuilder
from videohub.database import get_db
from videohub.middleware.auth import get_current_user, get_optional_viewer
from videohub.models.user import User
from videohub.models.content_schemas import VideoCreate, VideoUpdate, VideoView
from videohub.models.schemas import PagedResult
from videohub.services.content_service import ContentService
from videohub.services.entity_store import EntityStore, EntityKind
from videohub.services.logging_service import app_metrics
from videohub.utils.validators import parse_id

router = APIRouter()


@router.get("/", response_model=PagedResult[VideoView])
async def list_videos(
    query: Optional[str] = None,
    owner_id: Optional[str] = None,
    is_published: Optional[bool] = None,
    sort_by: str = "created_at",
    sort_type: str = "desc",
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="limit"),
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    db: Session = Depends(get_db)
):
    """
    List published videos, optionally searched and filtered by owner.

    A signed-in owner filtering on their own id also sees unpublished
    videos.

    Args:
        query: Free-text search
        owner_id: Only videos of this channel
        is_published: Publication filter (owner only)
        sort_by: created_at, updated_at, views, duration, title or relevance
        sort_type: asc or desc
        page: 1-based page number
        page_size: Items per page
    """
    feed_filter = FeedFilter(
        kind=EntityKind.VIDEO,
        query=query,
        owner_id=parse_id(owner_id, "owner_id") if owner_id else None,
        is_published=is_published
    )
    return FeedAssembler(db).assemble(
        feed_filter,
        SortSpec(field=sort_by, direction=sort_type),
        page=page,
        page_size=page_size,
        viewer_id=viewer_id
    )


@router.post("/", response_model=VideoView, status_code=status.HTTP_201_CREATED)
async def publish_video(
    video_data: VideoCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Publish a video whose media files are already stored."""
    video = ContentService(db).publish_video(
        owner_id=current_user.id,
        title=video_data.title,
        description=video_data.description,
        video_file=video_data.video_file,
        thumbnail=video_data.thumbnail,
        duration=video_data.duration
    )
    return ProjectionBuilder(db).project(EntityKind.VIDEO, video, current_user.id)


@router.get("/{video_id}", response_model=VideoView)
async def get_video(
    video_id: str,
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    db: Session = Depends(get_db)
):
    """
    Get a video with its owner's channel facts and record the view.

    The returned view count is the one read before this view was added.
    """
    video_id = parse_id(video_id, "video_id")
    view = ProjectionBuilder(db).get_entity_view(EntityKind.VIDEO, video_id, viewer_id)

    entities = EntityStore(db)
    entities.increment_view_count(video_id)
    app_metrics.increment_view()

    if viewer_id is not None:
        entities.append_to_watch_history(viewer_id, video_id)

    return view


@router.patch("/{video_id}", response_model=VideoView)
async def update_video(
    video_id: str,
    video_data: VideoUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update title, description and thumbnail of an owned video."""
    video = ContentService(db).update_video(
        parse_id(video_id, "video_id"),
        current_user.id,
        title=video_data.title,
        description=video_data.description,
        thumbnail=video_data.thumbnail
    )
    return ProjectionBuilder(db).project(EntityKind.VIDEO, video, current_user.id)


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an owned video together with its comments, likes and watch history."""
    ContentService(db).delete_video(parse_id(video_id, "video_id"), current_user.id)


@router.patch("/toggle/publish/{video_id}", response_model=VideoView)
async def toggle_publish_status(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Publish or unpublish an owned video."""
    video = ContentService(db).toggle_publish_status(parse_id(video_id, "video_id"), current_user.id)
    return ProjectionBuilder(db).project(EntityKind.VIDEO, video, current_user.id)
