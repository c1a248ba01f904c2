"""
Rate Limiting for the MentorConnect API
=======================================
slowapi limiter keyed by signed-in user, falling back to client IP.

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis:// when running more than one worker.

Special endpoints have their own limits:
- /auth/login: 5 req/min (brute force protection)
- /auth/signup: 3 req/min
- /conversations/messages: 30 req/min
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from mentorconnect.core.config import settings
from mentorconnect.core.logging_config import logger


AUTH_LIMIT = "5/minute"
SIGNUP_LIMIT = "3/minute"
MESSAGE_LIMIT = "30/minute"


def get_user_identifier(request: Request) -> str:
    """Rate limit key: authenticated user id, else IP address"""
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED and not settings.TESTING,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Answer 429 with a Retry-After header"""
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"
    retry_after = retry_after if retry_after.isdigit() else "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
            "retry_after_seconds": int(retry_after),
        },
        headers={
            "Retry-After": retry_after,
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_PER_MINUTE),
        }
    )
