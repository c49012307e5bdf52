from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models.api.users import UserResponse
from app.models.db.member_model import MemberModel
from app.models.db.user_model import UserModel
from app.repositories.base_repository import BaseRepository


class MemberRepository(BaseRepository[MemberModel, UserResponse]):
    """Repository for conversation membership edges."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MemberModel)

    async def get_by_id(self, id: Any) -> Optional[UserResponse]:
        """Get the user behind a membership row."""
        query = (
            select(self.model_class)
            .where(self.model_class.id == id)
            .options(selectinload(self.model_class.user))
        )
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def get_conversation_ids(self, user_id: str) -> List[int]:
        """Get ids of all conversations the user is a member of."""
        query = select(self.model_class.conversation_id).where(
            self.model_class.user_id == user_id
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_other_member(
        self, conversation_id: int, user_id: str
    ) -> Optional[UserResponse]:
        """Get the member of a direct conversation that is not ``user_id``."""
        query = (
            select(UserModel)
            .join(self.model_class, self.model_class.user_id == UserModel.id)
            .where(
                self.model_class.conversation_id == conversation_id,
                self.model_class.user_id != user_id,
            )
            .order_by(self.model_class.id)
        )
        result = await self.db.execute(query)
        user = result.scalars().first()
        return UserResponse.model_validate(user) if user else None

    def add_pending(self, conversation_id: int, user_id: str) -> None:
        """Stage a membership row in the caller's open transaction."""
        self.db.add(self.model_class(conversation_id=conversation_id, user_id=user_id))

    def _to_pydantic(self, db_model: Any) -> UserResponse:
        """Convert a loaded membership row to its user."""
        return UserResponse.model_validate(db_model.user)
