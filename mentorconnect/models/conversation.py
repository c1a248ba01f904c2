"""
Direct messaging between two users.

A conversation is keyed by the sorted pair of participant ids, so both
sides always land on the same row. It keeps a copy of the latest message
for the inbox list; the full history lives in `messages`.
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship

from mentorconnect.core.database import Base
from mentorconnect.core.types import GUID, generate_uuid, utc_now


class Conversation(Base):
    __tablename__ = "conversations"

    __table_args__ = (
        Index('ix_conversations_participant_a', 'participant_a'),
        Index('ix_conversations_participant_b', 'participant_b'),
        Index('ix_conversations_last_updated_at', 'last_updated_at'),
    )

    id = Column(String(80), primary_key=True)
    participant_a = Column(GUID, nullable=False)
    participant_b = Column(GUID, nullable=False)

    # {user_id: {"full_name": ..., "profile_image_url": ..., "role": ...}}
    participant_info = Column(JSON, default=dict, nullable=False)

    last_message_text = Column(Text, nullable=True)
    last_message_sender_id = Column(GUID, nullable=True)
    last_updated_at = Column(DateTime, default=utc_now, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.timestamp",
    )

    @property
    def participants(self) -> list:
        return [self.participant_a, self.participant_b]

    def other_participant(self, user_id: str) -> str:
        return self.participant_b if self.participant_a == str(user_id) else self.participant_a

    def __repr__(self):
        return f"<Conversation {self.id}>"


class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (
        Index('ix_messages_conversation_timestamp', 'conversation_id', 'timestamp'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    conversation_id = Column(String(80), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(GUID, nullable=False)
    receiver_id = Column(GUID, nullable=False)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=utc_now, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")

    def __repr__(self):
        return f"<Message {self.id} in {self.conversation_id}>"
