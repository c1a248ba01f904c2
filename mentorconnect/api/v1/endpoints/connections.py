"""
Connection endpoints.

Every action answers 200 with an outcome. `changed: false` means nothing
was written (already requested, already connected, nothing pending...)
and `message` is meant to be shown to the user as-is.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mentorconnect.core.database import get_db
from mentorconnect.models.user import PENDING_MENTEE_REQUESTS, User, UserRole
from mentorconnect.schemas.connection import (
    ConnectionListResponse,
    ConnectionOutcomeResponse,
    ConnectionRequestCreate,
    ConnectionStatusResponse,
    DirectConnectCreate,
    PendingRequestsResponse,
)
from mentorconnect.schemas.user import PublicProfileResponse
from mentorconnect.modules.auth.dependencies import (
    get_current_alumnus,
    get_current_student,
    get_profiled_user,
)
from mentorconnect.services.connection_service import ConnectionOutcome, ConnectionService

router = APIRouter()


def _outcome(outcome: ConnectionOutcome) -> ConnectionOutcomeResponse:
    return ConnectionOutcomeResponse(
        state=outcome.state,
        changed=outcome.changed,
        code=outcome.code,
        message=outcome.message,
    )


@router.get("", response_model=ConnectionListResponse)
async def list_my_connections(
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    """Mentors of a student, mentees of an alumnus"""
    users = await ConnectionService(db).list_connections(current_user)
    return ConnectionListResponse(
        items=[PublicProfileResponse.model_validate(user) for user in users],
        total=len(users),
    )


@router.get("/pending", response_model=PendingRequestsResponse)
async def list_pending_requests(
    current_user: User = Depends(get_current_alumnus),
    db: AsyncSession = Depends(get_db)
):
    users = await ConnectionService(db).list_pending_requests(current_user)
    found = {str(user.id) for user in users}
    missing = [user_id for user_id in current_user.ids(PENDING_MENTEE_REQUESTS) if user_id not in found]
    return PendingRequestsResponse(
        items=[PublicProfileResponse.model_validate(user) for user in users],
        total=len(users),
        missing_ids=missing or None,
    )


@router.get("/{other_id}/status", response_model=ConnectionStatusResponse)
async def get_connection_status(
    other_id: str,
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    if current_user.role == UserRole.STUDENT:
        student_id, alumnus_id = str(current_user.id), other_id
    else:
        student_id, alumnus_id = other_id, str(current_user.id)

    state, symmetric = await ConnectionService(db).get_connection_state(student_id, alumnus_id)
    return ConnectionStatusResponse(
        student_id=student_id,
        alumnus_id=alumnus_id,
        state=state,
        symmetric=symmetric,
    )


@router.post("/requests", response_model=ConnectionOutcomeResponse)
async def request_connection(
    body: ConnectionRequestCreate,
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    """Student asks an alumnus to be their mentor"""
    outcome = await ConnectionService(db).request_connection(str(current_user.id), body.alumnus_id)
    return _outcome(outcome)


@router.post("/requests/{student_id}/accept", response_model=ConnectionOutcomeResponse)
async def accept_request(
    student_id: str,
    current_user: User = Depends(get_current_alumnus),
    db: AsyncSession = Depends(get_db)
):
    outcome = await ConnectionService(db).accept_request(str(current_user.id), student_id)
    return _outcome(outcome)


@router.post("/requests/{student_id}/decline", response_model=ConnectionOutcomeResponse)
async def decline_request(
    student_id: str,
    current_user: User = Depends(get_current_alumnus),
    db: AsyncSession = Depends(get_db)
):
    outcome = await ConnectionService(db).decline_request(str(current_user.id), student_id)
    return _outcome(outcome)


@router.post("/direct", response_model=ConnectionOutcomeResponse)
async def connect_direct(
    body: DirectConnectCreate,
    current_user: User = Depends(get_current_alumnus),
    db: AsyncSession = Depends(get_db)
):
    """Alumnus connects with a student without a request"""
    outcome = await ConnectionService(db).connect_direct(str(current_user.id), body.student_id)
    return _outcome(outcome)


@router.delete("/{other_id}", response_model=ConnectionOutcomeResponse)
async def remove_connection(
    other_id: str,
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    outcome = await ConnectionService(db).remove_connection(str(current_user.id), current_user.role, other_id)
    return _outcome(outcome)
