from pydantic import BaseModel
from typing import List, Optional
import enum

from mentorconnect.schemas.user import PublicProfileResponse


class ConnectionState(str, enum.Enum):
    NONE = "none"
    REQUESTED = "requested"
    CONNECTED = "connected"


class ConnectionRequestCreate(BaseModel):
    alumnus_id: str


class DirectConnectCreate(BaseModel):
    student_id: str


class ConnectionOutcomeResponse(BaseModel):
    """Result of a connection action; changed=False marks a soft no-op"""
    state: ConnectionState
    changed: bool
    code: str
    message: str


class ConnectionStatusResponse(BaseModel):
    student_id: str
    alumnus_id: str
    state: ConnectionState
    # False when only one side references the other
    symmetric: bool


class ConnectionListResponse(BaseModel):
    items: List[PublicProfileResponse]
    total: int


class PendingRequestsResponse(BaseModel):
    items: List[PublicProfileResponse]
    total: int
    missing_ids: Optional[List[str]] = None
