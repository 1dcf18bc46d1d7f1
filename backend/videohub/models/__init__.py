"""Database models."""

from videohub.models.user import User, WatchHistory
from videohub.models.content_models import Video, Comment, Tweet
from videohub.models.engagement_models import Like, Subscription

__all__ = ["User", "WatchHistory", "Video", "Comment", "Tweet", "Like", "Subscription"]
