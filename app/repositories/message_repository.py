from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models.api.messages import MessageResponse, MessageWithSenderResponse
from app.models.db.message_model import MessageModel
from app.repositories.base_repository import BaseRepository


class MessageRepository(BaseRepository[MessageModel, MessageResponse]):
    """Repository for message operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MessageModel)

    async def get_by_conversation(
        self, conversation_id: int, limit: int = 50, offset: int = 0
    ) -> List[MessageWithSenderResponse]:
        """Get a page of messages, oldest first, each with its sender."""
        query = (
            select(self.model_class)
            .where(self.model_class.conversation_id == conversation_id)
            .options(selectinload(self.model_class.sender))
            .order_by(self.model_class.created_at, self.model_class.id)
            .limit(limit)
            .offset(offset)
        )  # type: ignore
        result = await self.db.execute(query)
        db_models = result.scalars().all()
        return [MessageWithSenderResponse.model_validate(m) for m in db_models]

    async def get_latest(self, conversation_id: int) -> Optional[MessageResponse]:
        """Get the most recent message of a conversation, if any."""
        query = (
            select(self.model_class)
            .where(self.model_class.conversation_id == conversation_id)
            .order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    def _to_pydantic(self, db_model: Any) -> MessageResponse:
        """Convert SQLAlchemy MessageModel to Pydantic MessageResponse."""
        return MessageResponse(
            id=db_model.id,
            conversation_id=db_model.conversation_id,
            sender_id=db_model.sender_id,
            content=db_model.content,
            created_at=db_model.created_at,
        )
