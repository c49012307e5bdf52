# API models for request/response contracts
from .contacts import AddContactRequest
from .conversations import (
    ConversationDetailResponse,
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
)
from .messages import MessageResponse, MessageWithSenderResponse, SendMessageRequest
from .push import JoinSignal, PushEnvelope, TypingSignal
from .users import UserResponse

__all__ = [
    "AddContactRequest",
    "ConversationDetailResponse",
    "ConversationResponse",
    "ConversationSummaryResponse",
    "CreateConversationRequest",
    "JoinSignal",
    "MessageResponse",
    "MessageWithSenderResponse",
    "PushEnvelope",
    "SendMessageRequest",
    "TypingSignal",
    "UserResponse",
]
