# Pydantic schemas
from mentorconnect.schemas.user import (
    PublicProfileResponse,
    UserResponse,
    ProfileCompletion,
    ProfileUpdate,
)
from mentorconnect.schemas.auth import (
    UserSignup,
    UserLogin,
    RefreshTokenRequest,
    Token,
    LoginResponse,
)
from mentorconnect.schemas.directory import (
    DirectoryFilters,
    DirectoryPageResponse,
    DirectoryOptionsResponse,
)
from mentorconnect.schemas.connection import (
    ConnectionState,
    ConnectionOutcomeResponse,
    ConnectionStatusResponse,
)
from mentorconnect.schemas.conversation import (
    MessageCreate,
    MessageResponse,
    ConversationResponse,
)
