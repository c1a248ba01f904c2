from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from mentorconnect.core.database import get_db
from mentorconnect.core.exceptions import AuthenticationError, AuthorizationError
from mentorconnect.core.security import create_token_pair, decode_token, REFRESH_TOKEN_TYPE
from mentorconnect.core.logging_config import logger, set_user_id
from mentorconnect.core.rate_limiter import limiter, AUTH_LIMIT, SIGNUP_LIMIT
from mentorconnect.models.user import User
from mentorconnect.schemas.auth import UserSignup, UserLogin, RefreshTokenRequest, Token, LoginResponse
from mentorconnect.schemas.user import UserResponse
from mentorconnect.modules.auth.dependencies import get_current_user
from mentorconnect.services.profile_service import ProfileService

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/signup", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(SIGNUP_LIMIT)
async def signup(
    request: Request,
    user_data: UserSignup,
    db: AsyncSession = Depends(get_db)
):
    """Create an account; the profile is completed in a second step (rate limited: 3/min)"""
    user = await ProfileService(db).create_user(user_data.email, user_data.password, user_data.full_name)
    set_user_id(str(user.id))

    logger.log_auth_event(
        event="signup",
        success=True,
        user_email=user.email,
        client_ip=_client_ip(request),
    )

    return LoginResponse(**create_token_pair(user.id, user.email), user=UserResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse)
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login user, optionally through a role portal (rate limited: 5/min)"""
    try:
        user = await ProfileService(db).authenticate(credentials.email, credentials.password, credentials.role)
    except (AuthenticationError, AuthorizationError) as exc:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason=exc.message,
            client_ip=_client_ip(request),
        )
        raise

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=_client_ip(request),
        user_role=user.role.value if user.role else None,
    )

    return LoginResponse(**create_token_pair(user.id, user.email), user=UserResponse.model_validate(user))


@router.post("/refresh", response_model=Token)
async def refresh_token(
    body: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new token pair"""
    payload = decode_token(body.refresh_token)
    if payload.get("type") != REFRESH_TOKEN_TYPE or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token"
        )

    user = await ProfileService(db).get_user(payload["sub"])
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    return Token(**create_token_pair(user.id, user.email))


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client drops them"""
    logger.log_auth_event(event="logout", success=True, user_email=current_user.email)
    return {"success": True, "message": "Signed out"}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user"""
    return current_user
