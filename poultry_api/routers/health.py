"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from poultry_api.config import settings
from poultry_api.database import engine
from poultry_api.utils.redis_client import get_redis

router = APIRouter(tags=["health"])

SERVICE_NAME = "Poultry Farm API"


@router.get("/health")
async def health_check():
    """Lightweight liveness check (no DB/Redis round trip)."""
    return {
        "success": True,
        "message": f"{SERVICE_NAME} is running",
        "data": {
            "status": "ok",
            "timestamp": datetime.utcnow().isoformat(),
            "environment": settings.environment,
        },
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check: 200 only if the database and Redis both answer."""
    checks = {
        "service": "ok",
        "database": "unknown",
        "redis": "unknown",
    }
    overall_healthy = True

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {str(e)[:100]}"
        overall_healthy = False

    try:
        redis_client = await get_redis()
        await redis_client.ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"error: {str(e)[:100]}"
        overall_healthy = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": overall_healthy,
            "message": "healthy" if overall_healthy else "unhealthy",
            "data": {
                "checks": checks,
                "timestamp": datetime.utcnow().isoformat(),
            },
        },
    )
