import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgumentError
from app.models.api.conversations import ConversationResponse
from app.repositories.conversation_repository import ConversationRepository
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class CreateConversationService:
    """Service for starting direct conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.user_repo = UserRepository(db)

    async def create_conversation(
        self, user_id: str, participant_id: str
    ) -> Tuple[ConversationResponse, bool]:
        """
        Start a direct conversation between two users:

        1. Validate the participant
        2. Reuse the existing direct conversation for this pair, if any
        3. Otherwise create the conversation with both memberships atomically

        Returns the conversation and whether it was newly created.
        """
        # Step 1: Validate participant
        if participant_id == user_id:
            raise InvalidArgumentError(
                "Cannot start a conversation with yourself", field="participantId"
            )
        participant = await self.user_repo.get_by_id(participant_id)
        if not participant:
            raise InvalidArgumentError("Participant not found", field="participantId")

        # Step 2: One direct conversation per pair
        existing = await self.conversation_repo.find_direct(user_id, participant_id)
        if existing:
            logger.info(
                "Reusing conversation %s for %s and %s",
                existing.id,
                user_id,
                participant_id,
            )
            return existing, False

        # Step 3: Create
        conversation = await self.conversation_repo.create_direct(
            user_id, participant_id
        )
        return conversation, True
