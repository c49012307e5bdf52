import asyncio
from datetime import datetime, timezone
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession

from app.clients.push_connection import PushConnection
from app.exceptions import InvalidArgumentError
from app.models.api.messages import MessageResponse
from app.repositories.conversation_repository import ConversationRepository
from app.repositories.message_repository import MessageRepository
from app.services.fanout_hub import FanoutHub
from app.services.send_message_service import SendMessageService


class HungConnection(PushConnection):
    """Subscriber whose socket never drains."""

    user_id = "u-bob"

    @property
    def is_open(self) -> bool:
        return True

    async def send(self, envelope: Dict[str, Any]) -> None:
        await asyncio.Event().wait()


class TestSendMessageService:
    """Unit tests for SendMessageService."""

    @pytest.fixture
    def sample_message(self) -> MessageResponse:
        return MessageResponse(
            id=1,
            conversation_id=7,
            sender_id="u-alice",
            content="hi",
            created_at=datetime.now(timezone.utc),
        )

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_rejects_blank_content(
        self, mock_db: AsyncMock, content: str
    ) -> None:
        service = SendMessageService(mock_db)
        with patch.object(
            service.message_repo, "create", new_callable=AsyncMock
        ) as mock_create:
            with pytest.raises(InvalidArgumentError) as exc_info:
                await service.send_message("u-alice", 7, content)

        assert exc_info.value.field == "content"
        mock_create.assert_not_called()

    async def test_persists_then_publishes(
        self, mock_db: AsyncMock, sample_message: MessageResponse
    ) -> None:
        hub = MagicMock(spec=FanoutHub)
        hub.publish = AsyncMock(return_value=1)
        service = SendMessageService(mock_db, hub)

        with patch.object(
            service.message_repo,
            "create",
            new_callable=AsyncMock,
            return_value=sample_message,
        ) as mock_create:
            result = await service.send_message("u-alice", 7, "hi")

        mock_create.assert_called_once_with(
            conversation_id=7, sender_id="u-alice", content="hi"
        )
        hub.publish.assert_called_once_with(7, sample_message)
        assert result == sample_message

    async def test_push_deferred_to_background_tasks(
        self, mock_db: AsyncMock, sample_message: MessageResponse
    ) -> None:
        hub = MagicMock(spec=FanoutHub)
        hub.publish = AsyncMock(return_value=1)
        background_tasks = BackgroundTasks()
        service = SendMessageService(mock_db, hub, background_tasks)

        with patch.object(
            service.message_repo,
            "create",
            new_callable=AsyncMock,
            return_value=sample_message,
        ):
            result = await service.send_message("u-alice", 7, "hi")

        assert result == sample_message
        hub.publish.assert_not_called()
        assert len(background_tasks.tasks) == 1

        await background_tasks()
        hub.publish.assert_called_once_with(7, sample_message)

    async def test_without_hub(
        self, mock_db: AsyncMock, sample_message: MessageResponse
    ) -> None:
        service = SendMessageService(mock_db)
        with patch.object(
            service.message_repo,
            "create",
            new_callable=AsyncMock,
            return_value=sample_message,
        ):
            assert await service.send_message("u-alice", 7, "hi") == sample_message


class TestSendMessageServiceIntegration:
    """SendMessageService against a real database."""

    async def test_read_after_write_in_call_order(self, test_db: AsyncSession) -> None:
        conversation = await ConversationRepository(test_db).create_direct(
            "u-alice", "u-bob"
        )
        service = SendMessageService(test_db, FanoutHub())

        sent = [
            await service.send_message("u-alice", conversation.id, "first"),
            await service.send_message("u-bob", conversation.id, "second"),
            await service.send_message("u-alice", conversation.id, "third"),
        ]

        stored = await MessageRepository(test_db).get_by_conversation(conversation.id)
        assert [m.id for m in stored] == [m.id for m in sent]
        assert [m.created_at for m in stored] == sorted(m.created_at for m in stored)

    async def test_hung_subscriber_does_not_hold_up_send(
        self, test_db: AsyncSession
    ) -> None:
        conversation = await ConversationRepository(test_db).create_direct(
            "u-alice", "u-bob"
        )
        hub = FanoutHub(send_timeout=0.05)
        await hub.join(HungConnection(), conversation.id)
        service = SendMessageService(test_db, hub)

        message = await asyncio.wait_for(
            service.send_message("u-alice", conversation.id, "hi"), 2.0
        )

        stored = await MessageRepository(test_db).get_by_conversation(conversation.id)
        assert [m.id for m in stored] == [message.id]
