"""
Health Check Endpoints

Endpoints:
- GET /api/health - Liveness; never touches the database
- GET /api/health/detailed - PostgreSQL connectivity and streak scheduler state
- GET /api/health/ready - Readiness; 503 until PostgreSQL answers
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.config import settings
from study_tracker.db.base import get_db
from study_tracker.services.scheduler import get_scheduled_jobs, scheduler

router = APIRouter(prefix="/api/health", tags=["health"])


async def _postgres_status(db: AsyncSession) -> dict:
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy"}


@router.get("")
async def health_check():
    """The process is up and serving requests."""
    return {"status": "healthy", "service": settings.APP_NAME}


@router.get("/detailed")
async def detailed_health_check(db: AsyncSession = Depends(get_db)):
    """
    Report each dependency separately.

    Overall status is "degraded" when PostgreSQL is unreachable. The
    scheduler entry lists the streak job and its next run.
    """
    postgres = await _postgres_status(db)
    return {
        "status": "healthy" if postgres["status"] == "healthy" else "degraded",
        "service": settings.APP_NAME,
        "dependencies": {
            "postgres": postgres,
            "scheduler": {
                "status": "running" if scheduler.running else "stopped",
                "jobs": get_scheduled_jobs(),
            },
        },
    }


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Ready to take traffic once the database answers."""
    postgres = await _postgres_status(db)
    if postgres["status"] != "healthy":
        return JSONResponse(
            status_code=503, content={"status": "not_ready", "postgres": postgres}
        )
    return {"status": "ready"}
