"""Identity gateway seam: session cookie -> typed acting user.

The identity provider issues the session cookie; this module only verifies
it and resolves the user row. A token is ``<user_id>.<hex hmac-sha256>``.
"""

import hashlib
import hmac
import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.api.users import UserResponse
from app.repositories.user_repository import UserRepository

load_dotenv()

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
SESSION_SECRET = os.getenv("SESSION_SECRET")
if not SESSION_SECRET:
    if os.getenv("ENV") == "prod":
        raise ValueError("SESSION_SECRET is required for production environments")
    SESSION_SECRET = "dev-session-secret"


def _signature(user_id: str) -> str:
    return hmac.new(
        SESSION_SECRET.encode(), user_id.encode(), hashlib.sha256
    ).hexdigest()


def sign_session(user_id: str) -> str:
    """Build the cookie value the identity provider hands out for a user."""
    return f"{user_id}.{_signature(user_id)}"


def read_session(token: Optional[str]) -> Optional[str]:
    """Return the user id carried by a valid token, else None."""
    if not token or "." not in token:
        return None
    user_id, _, signature = token.rpartition(".")
    if not user_id or not hmac.compare_digest(
        signature.encode(), _signature(user_id).encode()
    ):
        return None
    return user_id


async def resolve_acting_user(
    cookies: Mapping[str, str], db: AsyncSession
) -> Optional[UserResponse]:
    """Resolve request cookies to a known user, or None."""
    user_id = read_session(cookies.get(SESSION_COOKIE_NAME))
    if user_id is None:
        return None
    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        logger.warning("Valid session for unknown user %s", user_id)
    return user


async def get_acting_user(
    request: Request, db: AsyncSession = Depends(get_db)
) -> UserResponse:
    """Dependency returning the authenticated user or failing with 401."""
    user = await resolve_acting_user(request.cookies, db)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
