"""API Routers package."""

from study_tracker.routers import assignment as assignment_router
from study_tracker.routers import auth as auth_router
from study_tracker.routers import health as health_router
from study_tracker.routers import subjects as subjects_router

__all__ = ["assignment_router", "auth_router", "health_router", "subjects_router"]
