import os
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgumentError
from app.models.api.messages import MessageWithSenderResponse
from app.repositories.message_repository import MessageRepository

DEFAULT_PAGE_SIZE = 50
MESSAGE_PAGE_MAX = int(os.getenv("MESSAGE_PAGE_MAX", "200"))


class GetConversationMessagesService:
    """Service for retrieving messages from a specific conversation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.message_repo = MessageRepository(db)

    async def get_conversation_messages(
        self,
        conversation_id: int,
        limit: Optional[int] = DEFAULT_PAGE_SIZE,
        offset: Optional[int] = 0,
    ) -> List[MessageWithSenderResponse]:
        """
        Get a page of a conversation's history, oldest message first.

        Membership is checked by the caller before this is reached.
        """
        # Validate parameters
        if limit is not None and (limit < 0 or limit > MESSAGE_PAGE_MAX):
            raise InvalidArgumentError(
                f"Limit must be between 0 and {MESSAGE_PAGE_MAX}", field="limit"
            )
        if offset is not None and offset < 0:
            raise InvalidArgumentError("Offset must be non-negative", field="offset")

        # Use default values if None
        limit = DEFAULT_PAGE_SIZE if limit is None else limit
        offset = offset or 0
        if limit == 0:
            return []

        return await self.message_repo.get_by_conversation(
            conversation_id=conversation_id, limit=limit, offset=offset
        )
