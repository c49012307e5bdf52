from abc import ABC, abstractmethod
from typing import Any, Dict

from starlette.websockets import WebSocket, WebSocketState


class PushConnection(ABC):
    """Abstract handle for one live push-channel connection."""

    user_id: str

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the transport can currently accept sends."""

    @abstractmethod
    async def send(self, envelope: Dict[str, Any]) -> None:
        """Deliver one JSON envelope to the client."""


class WebSocketPushConnection(PushConnection):
    """Push connection backed by a Starlette WebSocket."""

    def __init__(self, websocket: WebSocket, user_id: str):
        self.websocket = websocket
        self.user_id = user_id

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, envelope: Dict[str, Any]) -> None:
        await self.websocket.send_json(envelope)

    def __repr__(self) -> str:
        return f"WebSocketPushConnection(user_id={self.user_id!r})"
