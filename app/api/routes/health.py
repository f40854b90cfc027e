from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
from typing import Dict, Any

from app.api.deps import get_db
from app.core.config import settings
from app.core.redis import redis_client

router = APIRouter(prefix="/health", tags=["Health Checks"])


@router.get("/")
async def health_check() -> Dict[str, str]:
    """
    Simple health check to verify the API service is running.
    """
    return {"status": "ok", "service": settings.PROJECT_NAME}


@router.get("/readiness")
def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Check if the application is ready to accept traffic.

    This checks database connectivity and Redis connectivity.
    """
    db_status = "ok"
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"error: {str(e)}"

    redis_status = "ok"
    try:
        redis_client.ping()
    except Exception as e:
        redis_status = f"error: {str(e)}"

    all_healthy = all(s == "ok" for s in [db_status, redis_status])

    return {
        "status": "ok" if all_healthy else "degraded",
        "database": db_status,
        "redis": redis_status,
        "provider": settings.FLIGHT_PROVIDER,
        "version": settings.VERSION
    }


@router.get("/version")
async def version_info() -> Dict[str, str]:
    """
    Get application version information.
    """
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION
    }
