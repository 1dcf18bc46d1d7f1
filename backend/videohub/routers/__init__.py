"""API routers."""

from videohub.routers import videos, comments, tweets, likes, subscriptions, dashboard, health

__all__ = ["videos", "comments", "tweets", "likes", "subscriptions", "dashboard", "health"]
