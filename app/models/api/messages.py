from datetime import datetime

from pydantic import Field, field_validator

from .base import ApiModel
from .users import UserResponse


class SendMessageRequest(ApiModel):
    """Request model for sending a message."""

    content: str = Field(..., min_length=1, description="Message text")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message content cannot be empty")
        return value


class MessageResponse(ApiModel):
    """Response model for message data."""

    id: int
    conversation_id: int
    sender_id: str
    content: str
    created_at: datetime


class MessageWithSenderResponse(MessageResponse):
    """Message annotated with its sender's user record."""

    sender: UserResponse
