"""
Connection Service - the mentor/mentee request state machine.

Per student/alumnus pair the relationship is one of:

    NONE ──request──> REQUESTED ──accept──> CONNECTED
     ^                   │                      │
     └─────decline───────┘                      │
     └────────────────remove────────────────────┘
    NONE ──connect_direct (alumnus)──> CONNECTED

State is not stored on its own; it is derived from three id sets on the
two user rows (alumnus.pending_mentee_requests, alumnus.my_mentees,
student.my_mentors).

Two write modes:

- symmetric (default): every transition rewrites both rows in one
  transaction. Both rows are version checked, so a transition computed
  from a stale read is rejected as a whole.
- legacy asymmetric: reproduces the historical writes. accept is two
  separate commits with no compensation, connect_direct only writes the
  alumnus side, remove only writes the caller's own set.

Asking for a transition the pair is already past (request twice, accept
with nothing pending, ...) is not an error: the caller gets an outcome
with changed=False and an explanatory message.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from mentorconnect.core.config import settings
from mentorconnect.core.database import commit_session
from mentorconnect.core.exceptions import (
    ConnectionStateConflictError,
    MentorConnectError,
    PartialWriteError,
    RoleMismatchError,
)
from mentorconnect.core.logging_config import logger
from mentorconnect.core.types import utc_now
from mentorconnect.models.user import (
    MY_MENTEES,
    MY_MENTORS,
    PENDING_MENTEE_REQUESTS,
    User,
    UserRole,
)
from mentorconnect.schemas.connection import ConnectionState
from mentorconnect.services.profile_service import ProfileService


MESSAGES = {
    "requested": "Connection request sent.",
    "already_requested": "You have already sent a request to this mentor.",
    "already_connected": "You are already connected.",
    "accepted": "Request accepted. You are now connected.",
    "repaired": "Connection completed.",
    "not_requested": "There is no pending request from this student.",
    "declined": "Request declined.",
    "connected": "Connected.",
    "removed": "Connection removed.",
    "not_connected": "You are not connected with this user.",
    "state_changed": "Connection state updated.",
    "unchanged": "Connection state already up to date.",
}


@dataclass
class ConnectionOutcome:
    state: ConnectionState
    changed: bool
    code: str
    message: str

    @classmethod
    def of(cls, state: ConnectionState, changed: bool, code: str) -> "ConnectionOutcome":
        return cls(state=state, changed=changed, code=code, message=MESSAGES[code])


def derive_state(student: User, alumnus: User) -> ConnectionState:
    """Pair state as seen from either side's sets"""
    student_id, alumnus_id = str(student.id), str(alumnus.id)
    if alumnus.has_id(MY_MENTEES, student_id) or student.has_id(MY_MENTORS, alumnus_id):
        return ConnectionState.CONNECTED
    if alumnus.has_id(PENDING_MENTEE_REQUESTS, student_id):
        return ConnectionState.REQUESTED
    return ConnectionState.NONE


def is_symmetric(student: User, alumnus: User) -> bool:
    """True when both mutual-reference sets agree about the pair"""
    return (
        alumnus.has_id(MY_MENTEES, str(student.id))
        == student.has_id(MY_MENTORS, str(alumnus.id))
    )


def apply_state(student: User, alumnus: User, new_state: ConnectionState) -> bool:
    """
    Rewrite the three sets so both rows describe `new_state`.

    Returns True if any set changed.
    """
    student_id, alumnus_id = str(student.id), str(alumnus.id)
    changed = False

    if new_state == ConnectionState.CONNECTED:
        changed |= alumnus.remove_id(PENDING_MENTEE_REQUESTS, student_id)
        changed |= alumnus.add_id(MY_MENTEES, student_id)
        changed |= student.add_id(MY_MENTORS, alumnus_id)
    elif new_state == ConnectionState.REQUESTED:
        changed |= alumnus.remove_id(MY_MENTEES, student_id)
        changed |= student.remove_id(MY_MENTORS, alumnus_id)
        changed |= alumnus.add_id(PENDING_MENTEE_REQUESTS, student_id)
    else:
        changed |= alumnus.remove_id(PENDING_MENTEE_REQUESTS, student_id)
        changed |= alumnus.remove_id(MY_MENTEES, student_id)
        changed |= student.remove_id(MY_MENTORS, alumnus_id)

    return changed


class ConnectionService:
    """
    Connection actions for one request/session.

    Args:
        db: Session the actions run in
        legacy_asymmetric: Override settings.LEGACY_ASYMMETRIC_CONNECTIONS
    """

    def __init__(self, db: AsyncSession, legacy_asymmetric: Optional[bool] = None):
        self.db = db
        self.profiles = ProfileService(db)
        if legacy_asymmetric is None:
            legacy_asymmetric = settings.LEGACY_ASYMMETRIC_CONNECTIONS
        self.legacy_asymmetric = legacy_asymmetric

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load_role(self, user_id: str, role: UserRole) -> User:
        # Always re-read: the precondition check must see the latest row
        user = await self.profiles.get_user(user_id, for_update=True)
        if user.role != role:
            raise RoleMismatchError(str(user_id), role.value)
        return user

    async def load_pair(self, student_id: str, alumnus_id: str) -> Tuple[User, User]:
        student = await self._load_role(student_id, UserRole.STUDENT)
        alumnus = await self._load_role(alumnus_id, UserRole.ALUMNI)
        return student, alumnus

    # ------------------------------------------------------------------
    # Atomic transition
    # ------------------------------------------------------------------

    async def _transition(
        self,
        student: User,
        alumnus: User,
        new_state: ConnectionState,
        action: str,
        code: str,
    ) -> ConnectionOutcome:
        changed = apply_state(student, alumnus, new_state)
        if changed:
            # Touch both rows so both versions are checked at commit
            now = utc_now()
            student.updated_at = now
            alumnus.updated_at = now
            await commit_session(self.db, f"connection.{action}")

        logger.log_connection_event(
            action, str(student.id), str(alumnus.id), changed, code if changed else "unchanged",
            mode="symmetric",
        )
        return ConnectionOutcome.of(new_state, changed, code if changed else "unchanged")

    async def set_connection_state(
        self,
        student_id: str,
        alumnus_id: str,
        new_state: ConnectionState,
        expected_state: Optional[ConnectionState] = None,
    ) -> ConnectionOutcome:
        """
        Move the pair to `new_state`, writing both rows in one transaction.

        Args:
            student_id: Student side of the pair
            alumnus_id: Alumnus side of the pair
            new_state: Target state
            expected_state: When given, the write only happens if the pair
                is currently in this state

        Raises:
            ConnectionStateConflictError: current state differs from expected_state
            ConcurrentModificationError: a row changed between read and write
        """
        student, alumnus = await self.load_pair(student_id, alumnus_id)
        current = derive_state(student, alumnus)
        if expected_state is not None and current != expected_state:
            raise ConnectionStateConflictError(expected_state.value, current.value)
        return await self._transition(student, alumnus, new_state, "set_state", "state_changed")

    async def get_connection_state(self, student_id: str, alumnus_id: str) -> Tuple[ConnectionState, bool]:
        """Current state of the pair and whether both sides agree"""
        student, alumnus = await self.load_pair(student_id, alumnus_id)
        return derive_state(student, alumnus), is_symmetric(student, alumnus)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _soft(self, action: str, student_id: str, alumnus_id: str,
              state: ConnectionState, code: str) -> ConnectionOutcome:
        logger.log_connection_event(action, str(student_id), str(alumnus_id), False, code)
        return ConnectionOutcome.of(state, False, code)

    async def request_connection(self, student_id: str, alumnus_id: str) -> ConnectionOutcome:
        """Student asks an alumnus to become their mentor"""
        student, alumnus = await self.load_pair(student_id, alumnus_id)
        state = derive_state(student, alumnus)

        if state == ConnectionState.REQUESTED:
            return self._soft("request", student_id, alumnus_id, state, "already_requested")
        if state == ConnectionState.CONNECTED:
            return self._soft("request", student_id, alumnus_id, state, "already_connected")

        if not self.legacy_asymmetric:
            return await self._transition(student, alumnus, ConnectionState.REQUESTED, "request", "requested")

        # The old student-side "add mentor" shortcut (my_mentors written with
        # no alumnus write) has no counterpart here: a student only reaches
        # CONNECTED through an alumnus accept or direct connect.
        alumnus.add_id(PENDING_MENTEE_REQUESTS, str(student.id))
        alumnus.updated_at = utc_now()
        await commit_session(self.db, "connection.request")
        logger.log_connection_event("request", str(student.id), str(alumnus.id), True, "requested", mode="legacy")
        return ConnectionOutcome.of(ConnectionState.REQUESTED, True, "requested")

    async def accept_request(self, alumnus_id: str, student_id: str) -> ConnectionOutcome:
        """
        Alumnus accepts a pending request.

        Re-running accept after a legacy partial write (alumnus side saved,
        student side lost) finishes the student side.
        """
        student, alumnus = await self.load_pair(student_id, alumnus_id)
        sid, aid = str(student.id), str(alumnus.id)

        if not alumnus.has_id(PENDING_MENTEE_REQUESTS, sid):
            if alumnus.has_id(MY_MENTEES, sid) and not student.has_id(MY_MENTORS, aid):
                await self._write_mentor_link(student, alumnus)
                logger.log_connection_event("accept", sid, aid, True, "repaired")
                return ConnectionOutcome.of(ConnectionState.CONNECTED, True, "repaired")
            state = derive_state(student, alumnus)
            code = "already_connected" if state == ConnectionState.CONNECTED else "not_requested"
            return self._soft("accept", sid, aid, state, code)

        if not self.legacy_asymmetric:
            return await self._transition(student, alumnus, ConnectionState.CONNECTED, "accept", "accepted")

        # Legacy: two independent writes, no compensation
        alumnus.remove_id(PENDING_MENTEE_REQUESTS, sid)
        alumnus.add_id(MY_MENTEES, sid)
        alumnus.updated_at = utc_now()
        await commit_session(self.db, "connection.accept.alumnus")

        try:
            await self._write_mentor_link(student, alumnus)
        except MentorConnectError as exc:
            logger.log_error_with_context(exc, context="connection.accept.student", student_id=sid, alumnus_id=aid)
            raise PartialWriteError("accept_request", applied="alumnus", failed="student")

        logger.log_connection_event("accept", sid, aid, True, "accepted", mode="legacy")
        return ConnectionOutcome.of(ConnectionState.CONNECTED, True, "accepted")

    async def _write_mentor_link(self, student: User, alumnus: User) -> None:
        """Student-side half of an accept: add the alumnus to my_mentors"""
        student.add_id(MY_MENTORS, str(alumnus.id))
        student.updated_at = utc_now()
        await commit_session(self.db, "connection.accept.student")

    async def decline_request(self, alumnus_id: str, student_id: str) -> ConnectionOutcome:
        """Alumnus declines; only the pending entry goes away"""
        student, alumnus = await self.load_pair(student_id, alumnus_id)
        state = derive_state(student, alumnus)

        if not alumnus.has_id(PENDING_MENTEE_REQUESTS, str(student.id)):
            return self._soft("decline", student_id, alumnus_id, state, "not_requested")

        if not self.legacy_asymmetric:
            return await self._transition(student, alumnus, ConnectionState.NONE, "decline", "declined")

        alumnus.remove_id(PENDING_MENTEE_REQUESTS, str(student.id))
        alumnus.updated_at = utc_now()
        await commit_session(self.db, "connection.decline")
        logger.log_connection_event("decline", str(student.id), str(alumnus.id), True, "declined", mode="legacy")
        return ConnectionOutcome.of(ConnectionState.NONE, True, "declined")

    async def connect_direct(self, alumnus_id: str, student_id: str) -> ConnectionOutcome:
        """Alumnus connects with a student without a request step"""
        student, alumnus = await self.load_pair(student_id, alumnus_id)
        sid, aid = str(student.id), str(alumnus.id)

        if self.legacy_asymmetric:
            if alumnus.has_id(MY_MENTEES, sid):
                return self._soft("connect_direct", sid, aid, ConnectionState.CONNECTED, "already_connected")
            alumnus.add_id(MY_MENTEES, sid)
            alumnus.updated_at = utc_now()
            await commit_session(self.db, "connection.connect_direct")
            logger.log_connection_event("connect_direct", sid, aid, True, "connected", mode="legacy")
            return ConnectionOutcome.of(ConnectionState.CONNECTED, True, "connected")

        if derive_state(student, alumnus) == ConnectionState.CONNECTED and is_symmetric(student, alumnus):
            return self._soft("connect_direct", sid, aid, ConnectionState.CONNECTED, "already_connected")
        return await self._transition(student, alumnus, ConnectionState.CONNECTED, "connect_direct", "connected")

    async def remove_connection(self, viewer_id: str, viewer_role: UserRole, other_id: str) -> ConnectionOutcome:
        """Either side ends the connection"""
        own_set = MY_MENTORS if viewer_role == UserRole.STUDENT else MY_MENTEES

        if self.legacy_asymmetric:
            viewer = await self._load_role(viewer_id, viewer_role)
            student_id, alumnus_id = self._pair_ids(viewer_role, viewer_id, other_id)
            if not viewer.remove_id(own_set, str(other_id)):
                return self._soft("remove", student_id, alumnus_id, ConnectionState.NONE, "not_connected")
            viewer.updated_at = utc_now()
            await commit_session(self.db, "connection.remove")
            logger.log_connection_event("remove", student_id, alumnus_id, True, "removed",
                                        mode="legacy", removed_by=viewer_role.value)
            return ConnectionOutcome.of(ConnectionState.NONE, True, "removed")

        student_id, alumnus_id = self._pair_ids(viewer_role, viewer_id, other_id)
        student, alumnus = await self.load_pair(student_id, alumnus_id)
        if derive_state(student, alumnus) != ConnectionState.CONNECTED:
            return self._soft("remove", student_id, alumnus_id, derive_state(student, alumnus), "not_connected")
        return await self._transition(student, alumnus, ConnectionState.NONE, "remove", "removed")

    @staticmethod
    def _pair_ids(viewer_role: UserRole, viewer_id: str, other_id: str) -> Tuple[str, str]:
        if viewer_role == UserRole.STUDENT:
            return str(viewer_id), str(other_id)
        return str(other_id), str(viewer_id)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_connections(self, user: User) -> List[User]:
        """Mentors of a student, or mentees of an alumnus"""
        own_set = MY_MENTORS if user.role == UserRole.STUDENT else MY_MENTEES
        return await self.profiles.get_users_by_ids(user.ids(own_set))

    async def list_pending_requests(self, alumnus: User) -> List[User]:
        return await self.profiles.get_users_by_ids(alumnus.ids(PENDING_MENTEE_REQUESTS))
