"""In-process fan-out of push events to live connections.

Delivery is best-effort: a connection that is not subscribed at publish
time never sees the event, and clients reconcile by re-fetching over REST.
All subscriber state lives in one process; fan-out across several server
processes is not handled.
"""

import asyncio
import logging
import os
from typing import Any, Dict, FrozenSet, List, Optional, Set

from starlette.requests import HTTPConnection

from app.clients.push_connection import PushConnection
from app.models.api.messages import MessageResponse
from app.models.api.push import MESSAGE_NEW, PushEnvelope

logger = logging.getLogger(__name__)

# Seconds a single connection may take to accept one push
PUSH_SEND_TIMEOUT = float(os.getenv("PUSH_SEND_TIMEOUT", "5.0"))


class FanoutHub:
    """Subscriber registry keyed by conversation id."""

    def __init__(self, send_timeout: float = PUSH_SEND_TIMEOUT) -> None:
        self.send_timeout = send_timeout
        self._subscribers: Dict[int, Set[PushConnection]] = {}
        # Every conversation a connection joined, so disconnect can clean all of them
        self._joined: Dict[PushConnection, Set[int]] = {}
        self._lock = asyncio.Lock()

    async def join(self, connection: PushConnection, conversation_id: int) -> None:
        """Subscribe a connection to a conversation (idempotent)."""
        async with self._lock:
            self._subscribers.setdefault(conversation_id, set()).add(connection)
            self._joined.setdefault(connection, set()).add(conversation_id)
        logger.debug("%r joined conversation %s", connection, conversation_id)

    async def disconnect(self, connection: PushConnection) -> None:
        """Remove a connection from every conversation it joined."""
        async with self._lock:
            conversation_ids = self._joined.pop(connection, set())
            for conversation_id in conversation_ids:
                subscribers = self._subscribers.get(conversation_id)
                if subscribers is None:
                    continue
                subscribers.discard(connection)
                if not subscribers:
                    del self._subscribers[conversation_id]
        logger.debug(
            "%r disconnected from conversations %s",
            connection,
            sorted(conversation_ids),
        )

    async def publish(self, conversation_id: int, message: MessageResponse) -> int:
        """Push ``message:new`` to every open subscriber; return deliveries made."""
        envelope = PushEnvelope(
            type=MESSAGE_NEW, data=message.model_dump(mode="json", by_alias=True)
        )
        return await self.broadcast(conversation_id, envelope)

    async def broadcast(
        self,
        conversation_id: int,
        envelope: PushEnvelope,
        exclude: Optional[PushConnection] = None,
    ) -> int:
        """Send an envelope to the conversation's open subscribers."""
        async with self._lock:
            targets: List[PushConnection] = list(
                self._subscribers.get(conversation_id, ())
            )

        payload: Dict[str, Any] = envelope.model_dump()
        # Closed connections are reaped by disconnect, not here
        recipients = [
            connection
            for connection in targets
            if connection is not exclude and connection.is_open
        ]
        results = await asyncio.gather(
            *(
                self._send(connection, conversation_id, payload)
                for connection in recipients
            )
        )
        return sum(results)

    async def _send(
        self, connection: PushConnection, conversation_id: int, payload: Dict[str, Any]
    ) -> bool:
        """Deliver to one connection; a slow or broken peer only loses its own push."""
        try:
            await asyncio.wait_for(connection.send(payload), self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Push to %r for conversation %s timed out after %ss",
                connection,
                conversation_id,
                self.send_timeout,
            )
            return False
        except Exception as e:
            logger.warning(
                "Push to %r for conversation %s failed: %s",
                connection,
                conversation_id,
                e,
            )
            return False
        return True

    def subscriber_count(self, conversation_id: int) -> int:
        """Number of connections currently subscribed to a conversation."""
        return len(self._subscribers.get(conversation_id, ()))

    def joined(self, connection: PushConnection) -> FrozenSet[int]:
        """Conversation ids a connection is subscribed to."""
        return frozenset(self._joined.get(connection, ()))


def get_hub(connection: HTTPConnection) -> FanoutHub:
    """Dependency returning the application's hub (created in lifespan)."""
    hub: FanoutHub = connection.app.state.hub
    return hub
