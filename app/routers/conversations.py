import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import DomainError, UnauthorizedError
from app.identity import get_acting_user
from app.models.api.conversations import (
    ConversationDetailResponse,
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
)
from app.models.api.messages import (
    MessageResponse,
    MessageWithSenderResponse,
    SendMessageRequest,
)
from app.models.api.users import UserResponse
from app.routers.errors import INTERNAL_ERROR, to_http_exception
from app.services.create_conversation_service import CreateConversationService
from app.services.fanout_hub import FanoutHub, get_hub
from app.services.get_conversation_messages_service import (
    MESSAGE_PAGE_MAX,
    GetConversationMessagesService,
)
from app.services.list_conversations_service import ListConversationsService
from app.services.send_message_service import SendMessageService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _conversation_for_member(
    conversation_id: int, user: UserResponse, db: AsyncSession
) -> ConversationDetailResponse:
    """Load a conversation the user belongs to.

    Missing conversation -> NotFoundError (404); not a member -> 401.
    """
    conversation = await ListConversationsService(db).get_conversation(
        conversation_id
    )
    if not any(member.id == user.id for member in conversation.members):
        raise UnauthorizedError("Unauthorized")
    return conversation


@router.get("", response_model=List[ConversationSummaryResponse])
async def list_conversations(
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
) -> List[ConversationSummaryResponse]:
    """
    List the caller's conversations, most recently active first.

    Each entry carries its last message and, for direct chats, the other member.
    """
    try:
        service = ListConversationsService(db)
        return await service.list_conversations(user.id)
    except Exception:
        logger.exception("Listing conversations failed for %s", user.id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    request: CreateConversationRequest,
    response: Response,
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
) -> ConversationResponse:
    """
    Start a direct conversation with another user.

    Returns 201 for a new conversation, 200 when the pair already has one.
    """
    try:
        service = CreateConversationService(db)
        conversation, created = await service.create_conversation(
            user.id, request.participant_id
        )
    except DomainError as e:
        raise to_http_exception(e)
    except Exception:
        logger.exception("Creating conversation failed for %s", user.id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

    if not created:
        response.status_code = 200
    return conversation


@router.get("/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: int,
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
) -> ConversationDetailResponse:
    """
    Get a conversation with its members.

    Path parameters:
    - conversation_id: id of the conversation
    """
    try:
        return await _conversation_for_member(conversation_id, user, db)
    except DomainError as e:
        raise to_http_exception(e)
    except Exception:
        logger.exception("Loading conversation %s failed", conversation_id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.get(
    "/{conversation_id}/messages", response_model=List[MessageWithSenderResponse]
)
async def get_conversation_messages(
    conversation_id: int,
    limit: int = Query(
        50,
        description="Maximum number of messages to return",
        ge=0,
        le=MESSAGE_PAGE_MAX,
    ),
    offset: int = Query(0, description="Number of messages to skip", ge=0),
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
) -> List[MessageWithSenderResponse]:
    """
    Get a page of a conversation's messages, oldest first.

    Query parameters:
    - limit: Maximum number of messages to return (default: 50)
    - offset: Number of messages to skip (default: 0)
    """
    try:
        await _conversation_for_member(conversation_id, user, db)
        service = GetConversationMessagesService(db)
        return await service.get_conversation_messages(
            conversation_id=conversation_id, limit=limit, offset=offset
        )
    except DomainError as e:
        raise to_http_exception(e)
    except Exception:
        logger.exception("Loading messages for %s failed", conversation_id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post(
    "/{conversation_id}/messages", response_model=MessageResponse, status_code=201
)
async def send_message(
    conversation_id: int,
    request: SendMessageRequest,
    background_tasks: BackgroundTasks,
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
    hub: FanoutHub = Depends(get_hub),
) -> MessageResponse:
    """Post a message; live subscribers get it pushed once the 201 is sent."""
    try:
        await _conversation_for_member(conversation_id, user, db)
        service = SendMessageService(db, hub, background_tasks)
        return await service.send_message(user.id, conversation_id, request.content)
    except DomainError as e:
        raise to_http_exception(e)
    except Exception:
        logger.exception("Sending message to %s failed", conversation_id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
