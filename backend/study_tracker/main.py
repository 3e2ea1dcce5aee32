"""
Study Progress Tracker API

Application factory and lifespan wiring:
- Logging configured from LOG_LEVEL
- Tables created and the streak scheduler started on startup
- Error handling, rate limiting and CORS middleware
- Auth, assignment, subjects and health routers

Run locally:
    uvicorn study_tracker.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from study_tracker.config import settings
from study_tracker.db.base import init_db
from study_tracker.middleware import setup_error_handling, setup_rate_limiting
from study_tracker.routers import (
    assignment_router,
    auth_router,
    health_router,
    subjects_router,
)
from study_tracker.services.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and run the scheduler for the lifetime of the app."""
    await init_db()
    start_scheduler()
    logger.info(f"{settings.APP_NAME} started")
    try:
        yield
    finally:
        stop_scheduler()
        logger.info(f"{settings.APP_NAME} stopped")


def create_app() -> FastAPI:
    """
    Build the FastAPI application.

    Returns:
        FastAPI: Configured application (lifespan not yet started).
    """
    configure_logging()

    app = FastAPI(title=f"{settings.APP_NAME} API", lifespan=lifespan)

    setup_error_handling(app, debug=settings.DEBUG)
    setup_rate_limiting(app, enabled=settings.RATE_LIMIT_ENABLED)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router.router)
    app.include_router(auth_router.router)
    app.include_router(assignment_router.router)
    app.include_router(subjects_router.router)

    return app


app = create_app()
