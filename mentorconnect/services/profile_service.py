"""
Profile Service - the user record store.

Creates the minimal record at sign-up, fills in the role-specific fields at
profile setup and applies later edits. Relationship sets are never touched
here; ConnectionService owns them.
"""

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorconnect.core.config import settings
from mentorconnect.core.database import commit_session
from mentorconnect.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    EmailAlreadyRegisteredError,
    ProfileAlreadyCompleteError,
    RoleMismatchLoginError,
    StoreUnavailableError,
    UserNotFoundError,
    ValidationError,
)
from mentorconnect.core.logging_config import logger
from mentorconnect.core.security import get_password_hash, verify_password
from mentorconnect.core.types import unique_ids, utc_now
from mentorconnect.models.user import User, UserRole
from mentorconnect.schemas.user import (
    ALUMNI_ONLY_FIELDS,
    STUDENT_ONLY_FIELDS,
    ProfileCompletion,
    ProfileUpdate,
    blank_required_fields,
)
from mentorconnect.utils.pagination import chunked


class ProfileService:
    """Reads and writes User rows for the signed-in viewer."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: str, for_update: bool = False) -> User:
        """
        Load a user by id.

        Args:
            user_id: User id
            for_update: Re-read from the store, overwriting any state the
                session already holds for this row

        Raises:
            UserNotFoundError: No such user
        """
        stmt = select(User).where(User.id == str(user_id))
        if for_update:
            stmt = stmt.execution_options(populate_existing=True)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.log_error_with_context(exc, context="get_user", target_user_id=str(user_id))
            raise StoreUnavailableError()
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_users_by_ids(
        self,
        user_ids: Iterable[str],
        chunk_size: Optional[int] = None,
    ) -> List[User]:
        """
        Fetch many users with chunked "in" queries.

        Order follows `user_ids`; ids with no matching row are skipped.
        """
        ids = unique_ids(user_ids)
        if not ids:
            return []

        size = chunk_size or settings.CONNECTION_LOOKUP_CHUNK_SIZE
        found = {}
        try:
            for chunk in chunked(ids, size):
                result = await self.db.execute(select(User).where(User.id.in_(chunk)))
                for user in result.scalars().all():
                    found[str(user.id)] = user
        except SQLAlchemyError as exc:
            logger.log_error_with_context(exc, context="get_users_by_ids", requested=len(ids))
            raise StoreUnavailableError()

        return [found[user_id] for user_id in ids if user_id in found]

    async def create_user(self, email: str, password: str, full_name: str) -> User:
        """Create the minimal record written at sign-up"""
        email = email.lower()
        if await self.get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError()

        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            full_name=full_name,
            is_profile_complete=False,
            my_mentors=[],
            my_mentees=[],
            pending_mentee_requests=[],
        )
        self.db.add(user)
        await commit_session(self.db, "create_user")
        await self.db.refresh(user)
        logger.info(f"Created user {user.id}", extra={"event_type": "user_created", "target_user_id": str(user.id)})
        return user

    async def authenticate(self, email: str, password: str, role: Optional[UserRole] = None) -> User:
        """
        Check credentials and, when given, the portal role.

        A user who has not picked a role yet may sign in through either
        portal; profile setup decides the role.
        """
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Incorrect email or password")

        if not user.is_active:
            raise AuthorizationError("User account is inactive")

        if role is not None and user.role is not None and user.role != role:
            raise RoleMismatchLoginError(user.role.value, role.value)

        user.last_login = utc_now()
        await commit_session(self.db, "authenticate")
        return user

    async def complete_profile(self, user: User, data: ProfileCompletion) -> User:
        """Set the role and its fields, then mark the profile complete"""
        if user.is_profile_complete and user.role is not None and user.role != data.role:
            raise ProfileAlreadyCompleteError(user.role.value)

        user.role = data.role
        for name in ("full_name", "profile_image_url", "contact_no", "address"):
            value = getattr(data, name)
            if value is not None:
                setattr(user, name, value)
        for name, value in data.role_fields().items():
            setattr(user, name, value.strip() if isinstance(value, str) else value)

        user.is_profile_complete = True
        user.updated_at = utc_now()
        await commit_session(self.db, "complete_profile")
        await self.db.refresh(user)

        logger.info(
            f"Profile completed for {user.id} as {user.role.value}",
            extra={"event_type": "profile_completed", "target_user_id": str(user.id), "role": user.role.value},
        )
        return user

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        """Apply a partial edit of the viewer's own profile"""
        changes = data.model_dump(exclude_unset=True)
        if changes.get("full_name", "") is None:
            del changes["full_name"]

        forbidden = ALUMNI_ONLY_FIELDS if user.role == UserRole.STUDENT else STUDENT_ONLY_FIELDS
        if user.role is None:
            forbidden = STUDENT_ONLY_FIELDS | ALUMNI_ONLY_FIELDS
        rejected = sorted(name for name in changes if name in forbidden)
        if rejected:
            raise ValidationError(
                f"Fields not editable for this role: {', '.join(rejected)}",
                field=rejected[0],
            )

        cleared = blank_required_fields(user.role, changes)
        if cleared:
            raise ValidationError(
                f"Required fields cannot be empty: {', '.join(cleared)}",
                field=cleared[0],
            )

        if not changes:
            return user

        for name, value in changes.items():
            setattr(user, name, value.strip() if isinstance(value, str) else value)
        user.updated_at = utc_now()
        await commit_session(self.db, "update_profile")
        await self.db.refresh(user)
        return user

    async def set_profile_image(self, user: User, url: str) -> User:
        """Point the profile at a freshly uploaded picture"""
        user.profile_image_url = url
        user.updated_at = utc_now()
        await commit_session(self.db, "set_profile_image")
        await self.db.refresh(user)
        return user
