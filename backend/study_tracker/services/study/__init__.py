"""
Study Tracking Services

Provides:
- TimeTrackingService: Per-day study buckets and dashboard aggregates
- StreakTrackingService: Daily goal and nightly streak evaluation
- SubjectService: Subject import, listing and completion updates
- progress: Pure completion calculations for chapter trees

Usage:
    from study_tracker.services.study import TimeTrackingService

    service = TimeTrackingService(db)
    focus = await service.get_weekly_focus_distribution(user_id)
"""

from study_tracker.services.study.progress import compute_completion
from study_tracker.services.study.streak_tracking import (
    StreakTrackingService,
    next_streak,
)
from study_tracker.services.study.subject_service import SubjectService
from study_tracker.services.study.time_tracking import TimeTrackingService

__all__ = [
    "compute_completion",
    "next_streak",
    "StreakTrackingService",
    "SubjectService",
    "TimeTrackingService",
]
