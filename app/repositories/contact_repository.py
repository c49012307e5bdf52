import logging
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models.api.users import UserResponse
from app.models.db.contact_model import ContactModel
from app.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ContactRepository(BaseRepository[ContactModel, UserResponse]):
    """Repository for directed address-book edges."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ContactModel)

    async def get_by_id(self, id: Any) -> Optional[UserResponse]:
        """Get the target user of a contact edge."""
        query = (
            select(self.model_class)
            .where(self.model_class.id == id)
            .options(selectinload(self.model_class.contact))
        )
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def get_contacts(self, user_id: str) -> List[UserResponse]:
        """Get the users in ``user_id``'s address book, oldest entry first."""
        query = (
            select(self.model_class)
            .where(self.model_class.user_id == user_id)
            .options(selectinload(self.model_class.contact))
            .order_by(self.model_class.created_at, self.model_class.id)
        )
        result = await self.db.execute(query)
        return [self._to_pydantic(db_model) for db_model in result.scalars().all()]

    async def exists(self, user_id: str, contact_id: str) -> bool:
        """Check whether the edge user_id -> contact_id is present."""
        query = select(self.model_class.id).where(
            self.model_class.user_id == user_id,
            self.model_class.contact_id == contact_id,
        )
        result = await self.db.execute(query)
        return result.first() is not None

    async def add_edge(self, user_id: str, contact_id: str) -> bool:
        """Insert the edge; return False if it already existed."""
        if await self.exists(user_id, contact_id):
            return False

        self.db.add(self.model_class(user_id=user_id, contact_id=contact_id))
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same edge
            await self.db.rollback()
            if await self.exists(user_id, contact_id):
                logger.info("Contact %s -> %s added concurrently", user_id, contact_id)
                return False
            raise
        return True

    def _to_pydantic(self, db_model: Any) -> UserResponse:
        """Convert a loaded contact edge to the target user."""
        return UserResponse.model_validate(db_model.contact)
