"""
Centralized enum definitions for the application.

All enums are organized by domain:
- api.py: Rate limit categories
- study.py: Week day labels, streak outcomes

Usage:
    from study_tracker.enums import RateLimitType, WeekDay
"""

from study_tracker.enums.api import RateLimitType
from study_tracker.enums.study import StreakOutcome, WeekDay

__all__ = [
    "RateLimitType",
    "StreakOutcome",
    "WeekDay",
]
