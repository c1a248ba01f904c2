from mentorconnect.services.profile_service import ProfileService
from mentorconnect.services.directory_service import DirectoryQueryEngine, DirectoryBrowser, DirectoryPage
from mentorconnect.services.connection_service import ConnectionService, ConnectionOutcome
from mentorconnect.services.message_service import MessageService, get_conversation_id
from mentorconnect.services.change_feed import ChangeFeed, Unsubscribe, change_feed

__all__ = [
    "ProfileService",
    "DirectoryQueryEngine",
    "DirectoryBrowser",
    "DirectoryPage",
    "ConnectionService",
    "ConnectionOutcome",
    "MessageService",
    "get_conversation_id",
    "ChangeFeed",
    "Unsubscribe",
    "change_feed",
]
