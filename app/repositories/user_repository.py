from typing import Any, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.api.users import UserResponse
from app.models.db.user_model import UserModel
from app.repositories.base_repository import BaseRepository


def _like_pattern(query: str) -> str:
    """Substring LIKE pattern with wildcards in the query matched literally."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class UserRepository(BaseRepository[UserModel, UserResponse]):
    """Read-only repository over identity-provider owned user rows."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserModel)

    async def get_by_identifier(self, identifier: str) -> Optional[UserResponse]:
        """Find a user by username, falling back to email (case-insensitive)."""
        needle = identifier.strip().lower()
        for column in (self.model_class.username, self.model_class.email):
            query = select(self.model_class).where(func.lower(column) == needle)
            result = await self.db.execute(query)
            db_model = result.scalars().first()
            if db_model:
                return self._to_pydantic(db_model)
        return None

    async def search(self, query: str, limit: int) -> List[UserResponse]:
        """Case-insensitive substring match over handle, email and names."""
        pattern = _like_pattern(query)
        statement = (
            select(self.model_class)
            .where(
                or_(
                    self.model_class.username.ilike(pattern, escape="\\"),
                    self.model_class.email.ilike(pattern, escape="\\"),
                    self.model_class.first_name.ilike(pattern, escape="\\"),
                    self.model_class.last_name.ilike(pattern, escape="\\"),
                )
            )
            .order_by(self.model_class.id)
            .limit(limit)
        )
        result = await self.db.execute(statement)
        return [self._to_pydantic(db_model) for db_model in result.scalars().all()]

    def _to_pydantic(self, db_model: Any) -> UserResponse:
        """Convert SQLAlchemy UserModel to Pydantic UserResponse."""
        return UserResponse.model_validate(db_model)
