"""Push channel: clients join conversations and receive new messages."""

import json
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, WebSocket, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.clients.push_connection import PushConnection, WebSocketPushConnection
from app.database import get_db
from app.identity import resolve_acting_user
from app.models.api.push import (
    TYPING_START,
    TYPING_STOP,
    JoinSignal,
    PushEnvelope,
    TypingSignal,
)
from app.services.fanout_hub import FanoutHub, get_hub

logger = logging.getLogger(__name__)

router = APIRouter()


async def handle_signal(
    hub: FanoutHub, connection: PushConnection, raw: Optional[Union[str, bytes]]
) -> None:
    """Apply one client signal. Bad input is logged and ignored."""
    try:
        payload = json.loads(raw) if raw is not None else None
    except ValueError:
        logger.warning("Ignoring non-JSON push signal from %r", connection)
        return
    if not isinstance(payload, dict):
        logger.warning("Ignoring non-object push signal from %r", connection)
        return

    signal_type = payload.get("type")
    try:
        if signal_type == "join":
            join = JoinSignal.model_validate(payload)
            await hub.join(connection, join.conversation_id)
        elif signal_type in (TYPING_START, TYPING_STOP):
            indicator = TypingSignal.model_validate(payload)
            if indicator.conversation_id not in hub.joined(connection):
                logger.warning(
                    "Ignoring %s for unjoined conversation %s from %r",
                    indicator.type,
                    indicator.conversation_id,
                    connection,
                )
                return
            envelope = PushEnvelope(
                type=indicator.type,
                data={
                    "conversationId": indicator.conversation_id,
                    "userId": connection.user_id,
                },
            )
            await hub.broadcast(
                indicator.conversation_id, envelope, exclude=connection
            )
        else:
            logger.warning(
                "Ignoring unknown push signal %r from %r", signal_type, connection
            )
    except ValidationError as e:
        logger.warning(
            "Ignoring malformed %r signal from %r: %s", signal_type, connection, e
        )


@router.websocket("/ws")
async def push_channel(
    websocket: WebSocket,
    db: AsyncSession = Depends(get_db),
    hub: FanoutHub = Depends(get_hub),
) -> None:
    """
    Long-lived push connection.

    Client -> server: {"type": "join", "conversationId": n}, typing signals.
    Server -> client: {"type": "message:new", "data": Message}.
    """
    user = await resolve_acting_user(websocket.cookies, db)
    # Only needed for the identity lookup; don't hold it for the connection lifetime
    await db.close()
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    connection = WebSocketPushConnection(websocket, user.id)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            await handle_signal(
                hub, connection, message.get("text") or message.get("bytes")
            )
    finally:
        await hub.disconnect(connection)
