"""Like toggles and liked-video listing."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from videohub.analytics.feed_assembler import FeedAssembler
from videohub.database import get_db
from videohub.middleware.auth import get_current_user
from videohub.models.user import User
from videohub.models.content_schemas import VideoView
from videohub.models.schemas import PagedResult, ToggleResult, ToggleState
from videohub.services.entity_store import EntityKind
from videohub.services.toggle_service import ToggleEngine
from videohub.utils.validators import parse_id

router = APIRouter()


def _like_result(state: ToggleState, subject: str) -> ToggleResult:
    verb = "liked" if state == ToggleState.CREATED else "unliked"
    return ToggleResult(state=state, message=f"{subject} {verb}")


@router.post("/toggle/v/{video_id}", response_model=ToggleResult)
async def toggle_video_like(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Like or unlike a video."""
    state = ToggleEngine(db).toggle_like(EntityKind.VIDEO, parse_id(video_id, "video_id"), current_user.id)
    return _like_result(state, "Video")


@router.post("/toggle/c/{comment_id}", response_model=ToggleResult)
async def toggle_comment_like(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Like or unlike a comment."""
    state = ToggleEngine(db).toggle_like(EntityKind.COMMENT, parse_id(comment_id, "comment_id"), current_user.id)
    return _like_result(state, "Comment")


@router.post("/toggle/t/{tweet_id}", response_model=ToggleResult)
async def toggle_tweet_like(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Like or unlike a tweet."""
    state = ToggleEngine(db).toggle_like(EntityKind.TWEET, parse_id(tweet_id, "tweet_id"), current_user.id)
    return _like_result(state, "Tweet")


@router.get("/videos", response_model=PagedResult[VideoView])
async def get_liked_videos(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="limit"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Videos the current user liked, newest like first."""
    return FeedAssembler(db).liked_videos(current_user.id, page=page, page_size=page_size)
