"""
Health Check Endpoints

- /health/live  - Basic liveness (app is running)
- /health/ready - Readiness check (database reachable and migrated)
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, Any
import time

from mentorconnect.core.config import settings
from mentorconnect.core.database import check_db
from mentorconnect.core.logging_config import logger
from mentorconnect.core.types import utc_now
from mentorconnect.services.change_feed import change_feed


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the users table is readable"""
    start = time.perf_counter()
    try:
        await check_db()
    except SQLAlchemyError as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "error": type(e).__name__,
        }

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - start) * 1000, 2),
    }


@router.get("/live")
async def liveness():
    return {"status": "alive", "timestamp": utc_now().isoformat()}


@router.get("/ready")
async def readiness():
    database = await check_database()
    healthy = database["status"] == "healthy"
    body = {
        "status": "ready" if healthy else "not_ready",
        "service": settings.APP_NAME,
        "checks": {
            "database": database,
            "live_subscriptions": change_feed.subscriber_count(),
        },
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
