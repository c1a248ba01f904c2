"""
Direct messaging endpoints.

REST for sending and reading; two WebSocket streams for live updates:

- WS /api/v1/conversations/ws?token=<jwt>
    pushes {"type": "conversations", "data": [...]} whenever the inbox changes
- WS /api/v1/conversations/{conversation_id}/ws?token=<jwt>
    pushes {"type": "messages", "data": [...]} whenever a message arrives

Clients may send "ping" and receive {"type": "pong"}.
Close codes: 4001 invalid token, 4003 not a participant.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from mentorconnect.core.database import get_db, get_session_local
from mentorconnect.core.exceptions import ConversationAccessError
from mentorconnect.core.logging_config import logger
from mentorconnect.core.rate_limiter import limiter, MESSAGE_LIMIT
from mentorconnect.models.user import User
from mentorconnect.schemas.conversation import (
    ConversationListResponse,
    ConversationResponse,
    MessageCreate,
    MessageListResponse,
    MessageResponse,
)
from mentorconnect.modules.auth.dependencies import get_profiled_user, resolve_user_from_token
from mentorconnect.services.change_feed import Unsubscribe
from mentorconnect.services.message_service import MessageService, watch_conversations, watch_messages

router = APIRouter()


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    """The viewer's conversations, most recent first"""
    conversations = await MessageService(db).list_conversations(str(current_user.id))
    return ConversationListResponse(
        items=[ConversationResponse.model_validate(item) for item in conversations]
    )


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(MESSAGE_LIMIT)
async def send_message(
    request: Request,
    body: MessageCreate,
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    return await MessageService(db).send_message(current_user, body.receiver_id, body.text)


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages(
    conversation_id: str,
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    """Latest messages of a conversation, oldest first"""
    messages = await MessageService(db).list_messages(conversation_id, str(current_user.id), limit)
    return MessageListResponse(
        conversation_id=conversation_id,
        items=[MessageResponse.model_validate(item) for item in messages],
    )


async def _authenticate_socket(websocket: WebSocket, token: str) -> Optional[User]:
    async with get_session_local()() as db:
        try:
            return await resolve_user_from_token(token, db)
        except HTTPException as exc:
            logger.warning(f"WebSocket auth rejected: {exc.detail}")
            await websocket.close(code=4001, reason="Invalid or expired token")
            return None


async def _serve(websocket: WebSocket, unsubscribe: Unsubscribe, label: str) -> None:
    """Keep the socket open until the client leaves, then drop the listener"""
    try:
        while True:
            incoming = await websocket.receive_text()
            if incoming.strip().lower() == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: {label}")
    finally:
        unsubscribe()


@router.websocket("/ws")
async def conversations_websocket(websocket: WebSocket, token: str = Query(...)):
    user = await _authenticate_socket(websocket, token)
    if user is None:
        return

    await websocket.accept()

    async def push(snapshot: list) -> None:
        await websocket.send_json({
            "type": "conversations",
            "data": [item.model_dump(mode="json") for item in snapshot],
        })

    unsubscribe = await watch_conversations(str(user.id), push)
    logger.info(f"WebSocket connected: conversations of {user.id}")
    await _serve(websocket, unsubscribe, f"conversations of {user.id}")


@router.websocket("/{conversation_id}/ws")
async def messages_websocket(websocket: WebSocket, conversation_id: str, token: str = Query(...)):
    user = await _authenticate_socket(websocket, token)
    if user is None:
        return

    async def push(snapshot: list) -> None:
        await websocket.send_json({
            "type": "messages",
            "conversation_id": conversation_id,
            "data": [item.model_dump(mode="json") for item in snapshot],
        })

    await websocket.accept()
    try:
        unsubscribe = await watch_messages(conversation_id, str(user.id), push)
    except ConversationAccessError:
        await websocket.close(code=4003, reason="Not a participant of this conversation")
        return

    logger.info(f"WebSocket connected: {user.id} on {conversation_id}")
    await _serve(websocket, unsubscribe, f"{user.id} on {conversation_id}")
