from typing import Any, Dict, Literal

from pydantic import BaseModel

from .base import ApiModel

MESSAGE_NEW = "message:new"
TYPING_START = "typing:start"
TYPING_STOP = "typing:stop"


class JoinSignal(ApiModel):
    """Client -> server: subscribe this connection to a conversation."""

    type: Literal["join"]
    conversation_id: int


class TypingSignal(ApiModel):
    """Client -> server: typing indicator for a joined conversation."""

    type: Literal["typing:start", "typing:stop"]
    conversation_id: int


class PushEnvelope(BaseModel):
    """Server -> client event."""

    type: str
    data: Dict[str, Any]
