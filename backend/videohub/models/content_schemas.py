"""Pydantic schemas for videos, comments and tweets."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Union
from datetime import datetime
from uuid import UUID

from videohub.models.schemas import OwnerProfile, ChannelProfile


# Video Schemas
class VideoCreate(BaseModel):
    """Schema for publishing a video whose media is already stored."""
    title: str = Field(..., max_length=255)
    description: str
    video_file: str = Field(..., max_length=500, description="Stored video URL")
    thumbnail: str = Field(..., max_length=500, description="Stored thumbnail URL")
    duration: float = Field(default=0.0, ge=0, description="Duration in seconds")


class VideoUpdate(BaseModel):
    """Schema for updating video details."""
    title: str = Field(..., max_length=255)
    description: str
    thumbnail: Optional[str] = Field(None, max_length=500)


class VideoView(BaseModel):
    """Denormalized, viewer-relative video projection."""
    id: UUID
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    owner: Union[ChannelProfile, OwnerProfile]
    likes_count: int = 0
    is_liked: bool = False


# Comment Schemas
class CommentCreate(BaseModel):
    """Schema for adding or editing a comment."""
    content: str

    @field_validator('content')
    @classmethod
    def strip_content(cls, v):
        """Strip surrounding whitespace; emptiness is checked by the service."""
        return v.strip()


class CommentView(BaseModel):
    """Denormalized, viewer-relative comment projection."""
    id: UUID
    video_id: UUID
    content: str
    created_at: datetime
    owner: Union[ChannelProfile, OwnerProfile]
    likes_count: int = 0
    is_liked: bool = False


# Tweet Schemas
class TweetCreate(BaseModel):
    """Schema for creating or editing a tweet."""
    content: str

    @field_validator('content')
    @classmethod
    def strip_content(cls, v):
        """Strip surrounding whitespace; emptiness is checked by the service."""
        return v.strip()


class TweetView(BaseModel):
    """Denormalized, viewer-relative tweet projection."""
    id: UUID
    content: str
    created_at: datetime
    owner: Union[ChannelProfile, OwnerProfile]
    likes_count: int = 0
    is_liked: bool = False
