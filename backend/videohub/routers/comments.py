"""Video comment endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from videohub.analytics.feed_assembler import FeedAssembler, FeedFilter, SortSpec
from videohub.analytics.projection_builder import ProjectionBuilder
from videohub.database import get_db
from videohub.middleware.auth import get_current_user, get_optional_viewer
from videohub.models.user import User
from videohub.models.content_schemas import CommentCreate, CommentView
from videohub.models.schemas import PagedResult
from videohub.services.content_service import ContentService
from videohub.services.entity_store import EntityKind
from videohub.utils.validators import parse_id

router = APIRouter()


@router.get("/{video_id}", response_model=PagedResult[CommentView])
async def get_video_comments(
    video_id: str,
    sort_by: str = "created_at",
    sort_type: str = "desc",
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="limit"),
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    db: Session = Depends(get_db)
):
    """List a video's comments, newest first by default."""
    feed_filter = FeedFilter(kind=EntityKind.COMMENT, video_id=parse_id(video_id, "video_id"))
    return FeedAssembler(db).assemble(
        feed_filter,
        SortSpec(field=sort_by, direction=sort_type),
        page=page,
        page_size=page_size,
        viewer_id=viewer_id
    )


@router.post("/{video_id}", response_model=CommentView, status_code=status.HTTP_201_CREATED)
async def add_comment(
    video_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Comment on a video."""
    comment = ContentService(db).add_comment(parse_id(video_id, "video_id"), current_user.id, comment_data.content)
    return ProjectionBuilder(db).project(EntityKind.COMMENT, comment, current_user.id)


@router.patch("/c/{comment_id}", response_model=CommentView)
async def update_comment(
    comment_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Edit an owned comment."""
    comment = ContentService(db).update_comment(
        parse_id(comment_id, "comment_id"), current_user.id, comment_data.content
    )
    return ProjectionBuilder(db).project(EntityKind.COMMENT, comment, current_user.id)


@router.delete("/c/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an owned comment and its likes."""
    ContentService(db).delete_comment(parse_id(comment_id, "comment_id"), current_user.id)
