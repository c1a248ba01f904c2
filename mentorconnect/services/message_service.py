"""
Message Service - direct messages between two users.

Each pair of users shares one conversation whose id is derived from the
two user ids, so either side computes the same id without a lookup.
Sending a message writes the message and refreshes the conversation's
last-message preview in the same transaction, then notifies listeners.
"""

from typing import Awaitable, Callable, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mentorconnect.core.config import settings
from mentorconnect.core.database import commit_session, get_session_local
from mentorconnect.core.exceptions import (
    ConversationAccessError,
    ConversationNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from mentorconnect.core.logging_config import logger
from mentorconnect.core.types import utc_now
from mentorconnect.models.conversation import Conversation, Message
from mentorconnect.models.user import User
from mentorconnect.schemas.conversation import ConversationResponse, MessageResponse
from mentorconnect.services.change_feed import (
    ChangeFeed,
    Unsubscribe,
    change_feed,
    conversations_topic,
    messages_topic,
)
from mentorconnect.services.profile_service import ProfileService


def get_conversation_id(uid1: str, uid2: str) -> str:
    """Same id for (a, b) and (b, a)"""
    return "_".join(sorted([str(uid1), str(uid2)]))


def participants_of(conversation_id: str) -> List[str]:
    return conversation_id.split("_")


def participant_card(user: User) -> dict:
    return {
        "full_name": user.full_name,
        "profile_image_url": user.profile_image_url,
        "role": user.role.value if user.role else None,
    }


class MessageService:
    """
    Service for direct messages.

    Use cases:
    - Send a message (creates the conversation on first message)
    - Inbox: the viewer's conversations, most recent first
    - History: a conversation's messages, oldest first
    """

    def __init__(self, db: AsyncSession, feed: Optional[ChangeFeed] = None):
        self.db = db
        self.feed = feed or change_feed

    async def send_message(self, sender: User, receiver_id: str, text: str) -> Message:
        """
        Send `text` from `sender` to `receiver_id`.

        Raises:
            ValidationError: Blank or oversized text, or messaging yourself
            UserNotFoundError: Unknown receiver
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError("Message text cannot be empty", field="text")
        if len(text) > settings.MESSAGE_MAX_LENGTH:
            raise ValidationError(
                f"Message text exceeds {settings.MESSAGE_MAX_LENGTH} characters", field="text"
            )
        if str(receiver_id) == str(sender.id):
            raise ValidationError("Cannot send a message to yourself", field="receiver_id")

        receiver = await ProfileService(self.db).get_user(receiver_id)
        conversation_id = get_conversation_id(sender.id, receiver.id)
        now = utc_now()

        conversation = await self.db.get(Conversation, conversation_id)
        if conversation is None:
            participant_a, participant_b = participants_of(conversation_id)
            conversation = Conversation(
                id=conversation_id,
                participant_a=participant_a,
                participant_b=participant_b,
                created_at=now,
            )
            self.db.add(conversation)

        conversation.participant_info = {
            str(sender.id): participant_card(sender),
            str(receiver.id): participant_card(receiver),
        }
        conversation.last_message_text = text
        conversation.last_message_sender_id = str(sender.id)
        conversation.last_updated_at = now

        message = Message(
            conversation_id=conversation_id,
            sender_id=str(sender.id),
            receiver_id=str(receiver.id),
            text=text,
            timestamp=now,
        )
        self.db.add(message)
        await commit_session(self.db, "send_message")
        await self.db.refresh(message)

        logger.debug(f"Message {message.id} sent in {conversation_id}")

        payload = {"conversation_id": conversation_id, "message_id": str(message.id)}
        await self.feed.publish(conversations_topic(str(sender.id)), payload)
        await self.feed.publish(conversations_topic(str(receiver.id)), payload)
        await self.feed.publish(messages_topic(conversation_id), payload)
        return message

    async def get_conversation(self, conversation_id: str, viewer_id: str) -> Conversation:
        if str(viewer_id) not in participants_of(conversation_id):
            raise ConversationAccessError(conversation_id)
        conversation = await self.db.get(Conversation, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def list_conversations(self, user_id: str) -> List[Conversation]:
        """The user's conversations, most recently active first"""
        user_id = str(user_id)
        try:
            result = await self.db.execute(
                select(Conversation)
                .where(or_(Conversation.participant_a == user_id, Conversation.participant_b == user_id))
                .order_by(Conversation.last_updated_at.desc())
            )
        except SQLAlchemyError as exc:
            logger.log_error_with_context(exc, context="list_conversations", target_user_id=user_id)
            raise StoreUnavailableError()
        return list(result.scalars().all())

    async def list_messages(
        self,
        conversation_id: str,
        viewer_id: str,
        limit: Optional[int] = None,
    ) -> List[Message]:
        """
        Latest `limit` messages of a conversation, oldest first.

        A conversation that has no messages yet returns an empty list.
        """
        if str(viewer_id) not in participants_of(conversation_id):
            raise ConversationAccessError(conversation_id)

        limit = limit or settings.MESSAGE_HISTORY_LIMIT
        try:
            result = await self.db.execute(
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.timestamp.desc())
                .limit(limit)
            )
        except SQLAlchemyError as exc:
            logger.log_error_with_context(exc, context="list_messages", conversation_id=conversation_id)
            raise StoreUnavailableError()
        return list(reversed(result.scalars().all()))


# ----------------------------------------------------------------------
# Live listeners
# ----------------------------------------------------------------------

OnSnapshot = Callable[[list], Awaitable[None]]


async def _watch(
    topic: str,
    load: Callable[[MessageService], Awaitable[list]],
    on_snapshot: OnSnapshot,
    session_factory: Optional[async_sessionmaker] = None,
    feed: Optional[ChangeFeed] = None,
) -> Unsubscribe:
    feed = feed or change_feed
    factory = session_factory or get_session_local()

    async def push(_event=None) -> None:
        async with factory() as session:
            snapshot = await load(MessageService(session, feed))
        await on_snapshot(snapshot)

    unsubscribe = await feed.subscribe(topic, push)
    try:
        await push()
    except Exception:
        unsubscribe()
        raise
    return unsubscribe


async def watch_conversations(
    user_id: str,
    on_snapshot: OnSnapshot,
    session_factory: Optional[async_sessionmaker] = None,
    feed: Optional[ChangeFeed] = None,
) -> Unsubscribe:
    """
    Push the user's conversation list now and after every change.

    Returns the Unsubscribe handle; call it when the listener is no
    longer needed.
    """
    async def load(service: MessageService) -> list:
        conversations = await service.list_conversations(user_id)
        return [ConversationResponse.model_validate(item) for item in conversations]

    return await _watch(conversations_topic(str(user_id)), load, on_snapshot, session_factory, feed)


async def watch_messages(
    conversation_id: str,
    viewer_id: str,
    on_snapshot: OnSnapshot,
    session_factory: Optional[async_sessionmaker] = None,
    feed: Optional[ChangeFeed] = None,
) -> Unsubscribe:
    """Push a conversation's message history now and after every new message"""
    if str(viewer_id) not in participants_of(conversation_id):
        raise ConversationAccessError(conversation_id)

    async def load(service: MessageService) -> list:
        messages = await service.list_messages(conversation_id, viewer_id)
        return [MessageResponse.model_validate(item) for item in messages]

    return await _watch(messages_topic(conversation_id), load, on_snapshot, session_factory, feed)
