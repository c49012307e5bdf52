import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.identity import get_acting_user
from app.models.api.users import UserResponse
from app.routers.errors import INTERNAL_ERROR
from app.services.search_users_service import SearchUsersService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/search", response_model=List[UserResponse])
async def search_users(
    query: str = Query("", description="Substring of handle, email or name"),
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    """
    Search users by handle, email, first or last name.

    Query parameters:
    - query: case-insensitive substring; empty yields an empty list
    """
    try:
        service = SearchUsersService(db)
        return await service.search_users(query)
    except Exception:
        logger.exception("User search failed")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.get("/me", response_model=UserResponse)
async def get_me(user: UserResponse = Depends(get_acting_user)) -> UserResponse:
    """Return the authenticated user."""
    return user
