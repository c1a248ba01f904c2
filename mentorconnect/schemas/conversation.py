from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime


class MessageCreate(BaseModel):
    receiver_id: str
    text: str = Field(..., max_length=4000)

    @field_validator('text')
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Message text cannot be empty")
        return value


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    text: str
    timestamp: datetime


class ParticipantInfo(BaseModel):
    full_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: Optional[str] = None


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    participants: List[str]
    participant_info: Dict[str, ParticipantInfo] = {}
    last_message_text: Optional[str] = None
    last_message_sender_id: Optional[str] = None
    last_updated_at: datetime


class ConversationListResponse(BaseModel):
    items: List[ConversationResponse]


class MessageListResponse(BaseModel):
    conversation_id: str
    items: List[MessageResponse]
