import os
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.api.users import UserResponse
from app.repositories.user_repository import UserRepository

USER_SEARCH_LIMIT = int(os.getenv("USER_SEARCH_LIMIT", "10"))


class SearchUsersService:
    """Service for finding users to talk to."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def search_users(self, query: str) -> List[UserResponse]:
        """Case-insensitive substring search, capped; empty query matches nothing."""
        query = (query or "").strip()
        if not query:
            return []
        return await self.user_repo.search(query, limit=USER_SEARCH_LIMIT)
