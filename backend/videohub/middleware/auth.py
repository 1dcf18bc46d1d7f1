"""Viewer identity dependencies for routes."""

from fastapi import Depends, HTTPException, status, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from videohub.database import get_db
from videohub.models.user import User
from videohub.utils.security import decode_access_token, user_id_from_payload

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user.

    Usage in routes:
        @router.post("/protected")
        def protected_route(current_user: User = Depends(get_current_user)):
            return {"user": current_user.username}

    Raises:
        HTTPException: 401 if the token is missing, invalid, or names an unknown user
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = user_id_from_payload(decode_access_token(credentials.credentials))
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_optional_viewer(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> Optional[UUID]:
    """
    Dependency to optionally get the viewer id.

    Returns None if no valid authentication is provided, so read routes
    fall back to the anonymous view.

    Args:
        authorization: Optional Authorization header
        db: Database session

    Returns:
        Viewer id or None
    """
    if not authorization:
        return None

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            return None
    except ValueError:
        return None

    user_id = user_id_from_payload(decode_access_token(token))
    if user_id is None or db.get(User, user_id) is None:
        return None

    return user_id
