import logging
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgumentError
from app.models.api.messages import MessageResponse
from app.repositories.message_repository import MessageRepository
from app.services.fanout_hub import FanoutHub

logger = logging.getLogger(__name__)


async def _push(hub: FanoutHub, conversation_id: int, message: MessageResponse) -> None:
    delivered = await hub.publish(conversation_id, message)
    logger.debug("Message %s pushed to %s connections", message.id, delivered)


class SendMessageService:
    """Service for posting a message into a conversation."""

    def __init__(
        self,
        db: AsyncSession,
        hub: Optional[FanoutHub] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.hub = hub
        self.background_tasks = background_tasks
        self.message_repo = MessageRepository(db)

    async def send_message(
        self, sender_id: str, conversation_id: int, content: str
    ) -> MessageResponse:
        """
        Main business logic for sending a message:
        1. Validate content
        2. Persist the message (visible to reads as soon as this returns)
        3. Fan out ``message:new`` to live subscribers, after the response
           when background tasks are available

        The caller has already verified that the sender is a member.
        """
        # Step 1: Validate
        if not content or not content.strip():
            raise InvalidArgumentError(
                "Message content cannot be empty", field="content"
            )

        # Step 2: Save to database
        message = await self.message_repo.create(
            conversation_id=conversation_id, sender_id=sender_id, content=content
        )
        logger.info(
            "Message %s created in conversation %s by %s",
            message.id,
            conversation_id,
            sender_id,
        )

        # Step 3: Push is best-effort and never fails the send
        if self.hub is not None:
            if self.background_tasks is not None:
                self.background_tasks.add_task(
                    _push, self.hub, conversation_id, message
                )
            else:
                await _push(self.hub, conversation_id, message)

        return message
