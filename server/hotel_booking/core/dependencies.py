"""FastAPI dependencies for database sessions and bearer authentication."""

import logging
from typing import Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import Session
from .config import settings
from .database import get_db
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Authorization header missing")

    parts = authorization.split()
    if len(parts) != 2:
        raise AuthenticationError("Invalid authorization header format")

    scheme, token = parts
    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")
    return token


async def get_current_user_id(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> int:
    """
    Authenticate the request and return the caller's user ID.

    The token must be an HS256 JWT signed with ``settings.jwt_secret`` whose
    ``sub`` claim is the user ID, and a login session must still exist for
    that exact token.

    Raises:
        AuthenticationError: If the header is missing or malformed, the token
            fails verification, or no session exists for it
    """
    token = _extract_bearer_token(authorization)

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
        user_id = int(payload["sub"])
    except (PyJWTError, KeyError, TypeError, ValueError) as e:
        logger.info("Bearer token rejected", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token") from e

    stmt = select(Session.id).where(Session.token == token, Session.user_id == user_id).limit(1)
    session_id = (await db.execute(stmt)).scalar_one_or_none()
    if session_id is None:
        raise AuthenticationError("No active session for this token")

    return user_id


RequiredAuth = Depends(get_current_user_id)
DatabaseSession = Depends(get_db)
