"""Tweet endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from videohub.analytics.feed_assembler import FeedAssembler, FeedFilter, SortSpec
from videohub.analytics.projection_builder import ProjectionBuilder
from videohub.database import get_db
from videohub.middleware.auth import get_current_user, get_optional_viewer
from videohub.models.user import User
from videohub.models.content_schemas import TweetCreate, TweetView
from videohub.models.schemas import PagedResult
from videohub.services.content_service import ContentService
from videohub.services.entity_store import EntityKind
from videohub.utils.validators import parse_id

router = APIRouter()


@router.post("/", response_model=TweetView, status_code=status.HTTP_201_CREATED)
async def create_tweet(
    tweet_data: TweetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Post a tweet."""
    tweet = ContentService(db).create_tweet(current_user.id, tweet_data.content)
    return ProjectionBuilder(db).project(EntityKind.TWEET, tweet, current_user.id)


@router.get("/user/{user_id}", response_model=PagedResult[TweetView])
async def get_user_tweets(
    user_id: str,
    sort_by: str = "created_at",
    sort_type: str = "desc",
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="limit"),
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    db: Session = Depends(get_db)
):
    """List a user's tweets, newest first by default."""
    feed_filter = FeedFilter(kind=EntityKind.TWEET, owner_id=parse_id(user_id, "user_id"))
    return FeedAssembler(db).assemble(
        feed_filter,
        SortSpec(field=sort_by, direction=sort_type),
        page=page,
        page_size=page_size,
        viewer_id=viewer_id
    )


@router.patch("/{tweet_id}", response_model=TweetView)
async def update_tweet(
    tweet_id: str,
    tweet_data: TweetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Edit an owned tweet."""
    tweet = ContentService(db).update_tweet(parse_id(tweet_id, "tweet_id"), current_user.id, tweet_data.content)
    return ProjectionBuilder(db).project(EntityKind.TWEET, tweet, current_user.id)


@router.delete("/{tweet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tweet(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an owned tweet and its likes."""
    ContentService(db).delete_tweet(parse_id(tweet_id, "tweet_id"), current_user.id)
