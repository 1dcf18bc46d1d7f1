"""Bearer token decoding."""

from typing import Optional
from uuid import UUID

import jwt

from videohub.config import settings


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and verify a JWT access token.

    Tokens are issued by the identity service; this side only verifies them.

    Args:
        token: Encoded JWT

    Returns:
        Token payload, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def user_id_from_payload(payload: Optional[dict]) -> Optional[UUID]:
    """Extract the user id carried in the ``sub`` claim."""
    if not payload or not payload.get("sub"):
        return None

    try:
        return UUID(str(payload["sub"]))
    except ValueError:
        return None
