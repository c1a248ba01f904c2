from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from mentorconnect.core.config import settings
from mentorconnect.core.database import init_db, close_db
from mentorconnect.core.exceptions import MentorConnectError, error_response
from mentorconnect.core.logging_config import logger
from mentorconnect.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from mentorconnect.core.rate_limiter import limiter, rate_limit_exceeded_handler
from mentorconnect.api.v1.router import api_router
import mentorconnect.models  # noqa: F401  register models on the metadata


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.SECRET_KEY or settings.SECRET_KEY == "CHANGE_ME":
        errors.append("SECRET_KEY is not set or using default value")

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    if settings.LEGACY_ASYMMETRIC_CONNECTIONS:
        warnings.append(
            "LEGACY_ASYMMETRIC_CONNECTIONS enabled - connect/remove write one side only "
            "and accept is not atomic"
        )

    if settings.is_production() and settings.RATE_LIMIT_STORAGE_URI.startswith("memory://"):
        warnings.append("Rate limits are kept in process memory - not shared between workers")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] ✓ Critical configuration validated")
    return True


async def ensure_database_ready() -> bool:
    """Create tables if they do not exist yet"""
    try:
        await init_db()
    except Exception as e:
        logger.error(f"[Startup] Failed to ensure database ready: {e}")
        return False
    logger.info("[Startup] Database tables ready")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API Version: {settings.API_VERSION}")
    logger.info("=" * 60)

    await validate_critical_config()

    if not await ensure_database_ready():
        logger.warning("[Startup] Database not ready - requests touching the store will fail")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Matches students with alumni mentors: directory, connection requests and direct messages",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)

# Uploaded profile pictures
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT), name="media")


@app.exception_handler(MentorConnectError)
async def mentorconnect_exception_handler(request: Request, exc: MentorConnectError):
    """Service errors carry their own status code"""
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}", error_code=exc.code)
    else:
        logger.info(
            f"{request.method} {request.url.path} rejected: {exc.code}",
            extra={"event_type": "request_rejected", "error_code": exc.code},
        )
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An error occurred"
        }
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "api": settings.API_V1_PREFIX,
    }
