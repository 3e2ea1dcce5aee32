"""
Study Goal and Streak Tracking Service

Stores the user's daily study goal and maintains the consecutive-day streak.

Responsibilities:
- Read and overwrite the daily goal
- Read the current streak
- Nightly evaluation: goal met yesterday → streak + 1, otherwise reset to 0

The nightly evaluation commits per user, so one failing user never blocks
the rest of the batch. Each user is evaluated at most once per day, and days
skipped by missed runs are replayed in order on the next run.

Usage:
    from study_tracker.services.study.streak_tracking import StreakTrackingService

    service = StreakTrackingService(db)
    await service.set_study_goal(user_id, 120)
    summary = await service.update_all_streaks()
"""

import logging
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.db.models import User
from study_tracker.enums.study import StreakOutcome
from study_tracker.middleware.error_handling import NotFoundError, StoreError
from study_tracker.models.base import StatusResponse
from study_tracker.models.study import (
    StreakResponse,
    StreakUpdateSummary,
    StudyGoalResponse,
)
from study_tracker.services.study import day_buckets
from study_tracker.services.study.time_tracking import TimeTrackingService

logger = logging.getLogger(__name__)


def next_streak(current: int, studied_minutes: int, goal_minutes: int) -> tuple[int, StreakOutcome]:
    """
    Advance a streak by one evaluated day.

    Args:
        current: Streak before the day.
        studied_minutes: Minutes studied that day.
        goal_minutes: The user's daily goal.

    Returns:
        tuple: (new streak, outcome)
    """
    if studied_minutes >= goal_minutes:
        return current + 1, StreakOutcome.INCREMENTED
    return 0, StreakOutcome.RESET


def _first_pending_day(evaluated_on: Optional[date], day: date) -> date:
    """First unevaluated day for a user; ``day`` itself when never evaluated."""
    if evaluated_on is None:
        return day
    return evaluated_on + timedelta(days=1)


class StreakTrackingService:
    """Service for study goals and the consecutive-day streak."""

    def __init__(self, db: AsyncSession):
        """
        Initialize the streak tracking service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    async def _get_user(self, user_id: UUID) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": str(user_id)})
        return user

    async def set_study_goal(self, user_id: UUID, minutes: int) -> StatusResponse:
        """
        Overwrite the user's daily study goal.

        Raises:
            NotFoundError: If the user doesn't exist.
        """
        user = await self._get_user(user_id)
        user.study_minutes = minutes
        await self.db.commit()

        logger.info(f"Study goal for user {user_id} set to {minutes} min")
        return StatusResponse(status=202, message="Study goal updated successfully")

    async def get_study_goal(self, user_id: UUID) -> StudyGoalResponse:
        """Return the user's daily goal in minutes."""
        user = await self._get_user(user_id)
        return StudyGoalResponse(minutes=user.study_minutes)

    async def get_streak(self, user_id: UUID) -> StreakResponse:
        """Return the user's current streak in days."""
        user = await self._get_user(user_id)
        return StreakResponse(streak=user.streak)

    async def update_all_streaks(self, day: Optional[date] = None) -> StreakUpdateSummary:
        """
        Evaluate every finished day up to ``day`` for every user.

        Each user resumes from the day after ``streak_evaluated_on``, so days
        skipped by missed runs are replayed in order before ``day``. Users never
        evaluated start at ``day``. Users already evaluated for ``day`` are
        skipped. The ``studied_minutes`` cache is refreshed to the total of the
        following day.

        Args:
            day: Last day to evaluate (defaults to yesterday in the study timezone).

        Returns:
            StreakUpdateSummary with per-outcome counts. The outcome counted is
            the one for ``day`` itself.

        Raises:
            StoreError: If the users or totals can't be loaded at all.
        """
        day = day or day_buckets.yesterday()
        summary = StreakUpdateSummary(day=day)
        time_tracking = TimeTrackingService(self.db)

        try:
            result = await self.db.execute(
                select(User.id, User.streak, User.study_minutes, User.streak_evaluated_on)
            )
            pending = [
                (user_id, streak, goal, _first_pending_day(evaluated_on, day))
                for user_id, streak, goal, evaluated_on in result.all()
                if evaluated_on is None or evaluated_on < day
            ]
            if not pending:
                logger.info(f"Streak update for {day}: nothing to evaluate")
                return summary

            start = min(first_day for _, _, _, first_day in pending)
            studied = await time_tracking.get_daily_totals_by_user(start, day)
            following = await time_tracking.get_day_totals_by_user(day + timedelta(days=1))
        except SQLAlchemyError as e:
            raise StoreError("Failed to load data for streak update") from e

        for user_id, streak, goal, first_day in pending:
            days = studied.get(user_id, {})
            evaluated = first_day
            while evaluated <= day:
                streak, outcome = next_streak(streak, days.get(evaluated, 0), goal)
                evaluated += timedelta(days=1)

            if first_day < day:
                logger.info(
                    f"Streak for user {user_id} caught up from {first_day} to {day}"
                )

            try:
                await self.db.execute(
                    update(User)
                    .where(User.id == user_id)
                    .values(
                        streak=streak,
                        streak_evaluated_on=day,
                        studied_minutes=following.get(user_id, 0),
                    )
                )
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                summary.failed += 1
                logger.error(f"Streak update failed for user {user_id}: {e}")
                continue

            summary.processed += 1
            if outcome == StreakOutcome.INCREMENTED:
                summary.incremented += 1
            else:
                summary.reset += 1

        logger.info(
            f"Streak update for {day}: {summary.processed} processed, "
            f"{summary.incremented} incremented, {summary.reset} reset, "
            f"{summary.failed} failed"
        )
        return summary
