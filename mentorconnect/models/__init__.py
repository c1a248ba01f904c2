# Re-export all models for convenient imports
from mentorconnect.models.user import User, UserRole
from mentorconnect.models.conversation import Conversation, Message

__all__ = [
    "User",
    "UserRole",
    "Conversation",
    "Message",
]
