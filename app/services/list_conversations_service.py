from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.api.conversations import (
    ConversationDetailResponse,
    ConversationSummaryResponse,
)
from app.repositories.conversation_repository import ConversationRepository
from app.repositories.member_repository import MemberRepository
from app.repositories.message_repository import MessageRepository


class ListConversationsService:
    """Service for the inbox view and single-conversation lookups."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.member_repo = MemberRepository(db)
        self.message_repo = MessageRepository(db)

    async def list_conversations(
        self, user_id: str
    ) -> List[ConversationSummaryResponse]:
        """
        List the user's conversations, most recently active first:

        1. Find conversation ids the user is a member of
        2. Load those conversations
        3. Attach the latest message and, for direct chats, the other member
        4. Sort by last-message time, falling back to creation time
        """
        # Step 1: Memberships
        conversation_ids = await self.member_repo.get_conversation_ids(user_id)
        if not conversation_ids:
            return []

        # Step 2: Conversations
        conversations = await self.conversation_repo.get_by_ids(conversation_ids)

        # Step 3: Enrich
        summaries = []
        for conversation in conversations:
            last_message = await self.message_repo.get_latest(conversation.id)
            other_member = None
            if not conversation.is_group:
                other_member = await self.member_repo.get_other_member(
                    conversation.id, user_id
                )
            summaries.append(
                ConversationSummaryResponse(
                    **conversation.model_dump(),
                    last_message=last_message,
                    unread_count=0,
                    other_member=other_member,
                )
            )

        # Step 4: Most recent first
        summaries.sort(key=lambda s: (s.effective_timestamp, s.id), reverse=True)
        return summaries

    async def get_conversation(
        self, conversation_id: int
    ) -> ConversationDetailResponse:
        """Get a conversation with its members; no membership filtering here."""
        conversation = await self.conversation_repo.get_with_members(conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation
