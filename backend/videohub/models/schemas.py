"""Pydantic schemas shared across projections and listings."""

from pydantic import BaseModel
from typing import Generic, List, Optional, TypeVar
from datetime import datetime
from uuid import UUID
from enum import Enum


T = TypeVar("T")


# ============================================
# Profile Fragments
# ============================================

class OwnerProfile(BaseModel):
    """Owner fragment embedded in every content projection."""
    id: UUID
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserProfile(OwnerProfile):
    """Item shape for subscriber / subscribed-channel listings (no counts)."""


class ChannelProfile(OwnerProfile):
    """Owner fragment for detail views, with subscription facts."""
    subscribers_count: int = 0
    is_subscribed: bool = False


class ChannelView(OwnerProfile):
    """Projection of a user viewed as a channel."""
    cover_image_url: Optional[str] = None
    created_at: datetime
    subscribers_count: int = 0
    subscribed_to_count: int = 0
    is_subscribed: bool = False


# ============================================
# Pagination
# ============================================

class PagedResult(BaseModel, Generic[T]):
    """One page of a feed or listing."""
    items: List[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int


# ============================================
# Toggles & Stats
# ============================================

class ToggleState(str, Enum):
    """Outcome of a toggle."""
    CREATED = "created"
    REMOVED = "removed"


class ToggleResult(BaseModel):
    """Response body for like / subscription toggles."""
    state: ToggleState
    message: str


class ChannelStats(BaseModel):
    """Channel-level rollup for the owner dashboard."""
    subscribers_count: int = 0
    videos_count: int = 0
    views_count: int = 0
    likes_count: int = 0
