from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import ApiModel
from .messages import MessageResponse
from .users import UserResponse


class CreateConversationRequest(ApiModel):
    """Request model for starting a direct conversation."""

    participant_id: str = Field(
        ..., min_length=1, description="User id of the other member"
    )


class ConversationResponse(ApiModel):
    """Response model for conversation data."""

    id: int
    name: Optional[str] = None
    is_group: bool
    created_at: datetime


class ConversationDetailResponse(ConversationResponse):
    """Conversation with its full member list."""

    members: List[UserResponse]


class ConversationSummaryResponse(ConversationResponse):
    """Conversation enriched for inbox views."""

    last_message: Optional[MessageResponse] = None
    # Unread tracking is not implemented; always zero
    unread_count: int = 0
    other_member: Optional[UserResponse] = None

    @property
    def effective_timestamp(self) -> datetime:
        """Last-message time if present, else conversation creation time."""
        if self.last_message is not None:
            return self.last_message.created_at
        return self.created_at
