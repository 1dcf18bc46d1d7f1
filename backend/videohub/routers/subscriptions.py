"""Channel subscription endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from videohub.analytics.feed_assembler import FeedAssembler
from videohub.config import settings
from videohub.database import get_db
from videohub.exceptions import Forbidden
from videohub.middleware.auth import get_current_user
from videohub.models.user import User
from videohub.models.schemas import PagedResult, ToggleResult, ToggleState, UserProfile
from videohub.services.toggle_service import ToggleEngine
from videohub.utils.validators import parse_id

router = APIRouter()


@router.post("/c/{channel_id}", response_model=ToggleResult)
async def toggle_subscription(
    channel_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Subscribe to or unsubscribe from a channel.

    Subscribing to your own channel is refused only when
    ALLOW_SELF_SUBSCRIPTION is turned off.
    """
    channel_id = parse_id(channel_id, "channel_id")
    if channel_id == current_user.id and not settings.ALLOW_SELF_SUBSCRIPTION:
        raise Forbidden("You cannot subscribe to your own channel")

    state = ToggleEngine(db).toggle_subscription(channel_id, current_user.id)
    message = "Subscribed" if state == ToggleState.CREATED else "Unsubscribed"
    return ToggleResult(state=state, message=message)


@router.get("/c/{channel_id}", response_model=PagedResult[UserProfile])
async def get_channel_subscribers(
    channel_id: str,
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="limit"),
    db: Session = Depends(get_db)
):
    """Users subscribed to a channel."""
    return FeedAssembler(db).channel_subscribers(parse_id(channel_id, "channel_id"), page=page, page_size=page_size)


@router.get("/u/{subscriber_id}", response_model=PagedResult[UserProfile])
async def get_subscribed_channels(
    subscriber_id: str,
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="limit"),
    db: Session = Depends(get_db)
):
    """Channels a user subscribes to."""
    return FeedAssembler(db).subscribed_channels(
        parse_id(subscriber_id, "subscriber_id"), page=page, page_size=page_size
    )
