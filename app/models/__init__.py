# Export all models
from .api import (
    AddContactRequest,
    ConversationDetailResponse,
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
    JoinSignal,
    MessageResponse,
    MessageWithSenderResponse,
    PushEnvelope,
    SendMessageRequest,
    TypingSignal,
    UserResponse,
)
from .db import (
    ContactModel,
    ConversationModel,
    MemberModel,
    MessageModel,
    UserModel,
)

__all__ = [
    # API models
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
    # DB models
    "ContactModel",
    "ConversationModel",
    "MemberModel",
    "MessageModel",
    "UserModel",
]
