"""Middleware modules for FastAPI application."""

from videohub.middleware.auth import get_current_user, get_optional_viewer

__all__ = ["get_current_user", "get_optional_viewer"]
