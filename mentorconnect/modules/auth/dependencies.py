from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import uuid

from mentorconnect.core.database import get_db
from mentorconnect.core.exceptions import ProfileIncompleteError
from mentorconnect.core.logging_config import set_user_id
from mentorconnect.core.security import decode_token, ACCESS_TOKEN_TYPE
from mentorconnect.models.user import User

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_user_from_token(token: str, db: AsyncSession) -> User:
    """
    Turn an access token into an active User.

    Shared by the HTTP dependency and the WebSocket endpoints, which
    receive the token as a query parameter.
    """
    payload = decode_token(token)

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token payload")

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid user ID format")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    set_user_id(str(user.id))
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user = await resolve_user_from_token(credentials.credentials, db)
    # Rate limiter keys on this
    request.state.user_id = str(user.id)
    return user


async def get_profiled_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """Signed-in user who has finished profile setup"""
    if not current_user.is_profile_complete or current_user.role is None:
        raise ProfileIncompleteError()
    return current_user


async def get_current_student(
    current_user: User = Depends(get_profiled_user)
) -> User:
    if not current_user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required"
        )
    return current_user


async def get_current_alumnus(
    current_user: User = Depends(get_profiled_user)
) -> User:
    if not current_user.is_alumni:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Alumni access required"
        )
    return current_user
