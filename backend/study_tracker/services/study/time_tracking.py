"""
Study Time Tracking Service

Records study sessions into per-day buckets and aggregates them into the
dashboard summaries.

Responsibilities:
- Atomically add session minutes to the (user, subject, day) bucket
- Sum today's minutes across subjects
- Build the Monday-to-Sunday focus distribution
- Build the trailing-week per-subject mastery summary
- Provide per-user day totals for the nightly streak job

Usage:
    from study_tracker.services.study.time_tracking import TimeTrackingService

    service = TimeTrackingService(db)
    await service.record_study_session(user_id, subject_id, minutes=30)
    today = await service.get_today_total(user_id)
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import Insert, insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.config import settings
from study_tracker.db.models import StudyTimeEntry, Subject, User
from study_tracker.enums.study import WeekDay
from study_tracker.middleware.error_handling import NotFoundError, StoreError
from study_tracker.models.base import MessageResponse
from study_tracker.models.study import (
    FocusDay,
    SubjectMastery,
    TodayStudyTime,
    WeeklyMasteryResponse,
)
from study_tracker.services.study import day_buckets
from study_tracker.services.study.progress import compute_completion

logger = logging.getLogger(__name__)


class TimeTrackingService:
    """
    Service for recording and aggregating study time.

    All reads group StudyTimeEntry rows with SQL aggregates; the only write
    is a single INSERT ... ON CONFLICT DO UPDATE per session.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the time tracking service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record_study_session(
        self,
        user_id: UUID,
        subject_id: UUID,
        minutes: int,
        completed_topics: int = 0,
        day: Optional[date] = None,
    ) -> MessageResponse:
        """
        Add a study session to today's bucket for the subject.

        Creates the bucket on the first session of the day; later sessions
        increment ``study_minutes`` and ``number_of_completed_topics`` in
        place. The user's ``studied_minutes`` cache is incremented as well.

        Args:
            user_id: Owner of the session.
            subject_id: Subject studied; must belong to the user.
            minutes: Positive number of minutes studied.
            completed_topics: Subtopics completed during the session.
            day: Bucket day (defaults to today in the study timezone).

        Returns:
            MessageResponse confirming the update.

        Raises:
            NotFoundError: If the subject doesn't exist for this user.
            StoreError: If the store rejects the write.
        """
        day = day or day_buckets.today()

        owned = await self.db.execute(
            select(Subject.id).where(Subject.id == subject_id, Subject.user_id == user_id)
        )
        if owned.scalar_one_or_none() is None:
            raise NotFoundError("Subject not found", details={"subject_id": str(subject_id)})

        stmt = self.build_session_upsert(
            user_id, subject_id, day, minutes, completed_topics
        ).returning(StudyTimeEntry.study_minutes)

        try:
            result = await self.db.execute(stmt)
            bucket_minutes = result.scalar_one()
            await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(studied_minutes=User.studied_minutes + minutes)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Failed to record study time") from e

        logger.debug(
            f"Recorded {minutes} min for subject {subject_id} on {day} "
            f"(bucket total {bucket_minutes})"
        )
        return MessageResponse(message="time is updated")

    @staticmethod
    def build_session_upsert(
        user_id: UUID,
        subject_id: UUID,
        day: date,
        minutes: int,
        completed_topics: int,
    ) -> Insert:
        """
        Build the atomic add-to-bucket statement.

        Inserts a new (user, subject, day) row or, when one already exists,
        adds the new values to it. Relies on uq_study_time_user_subject_day.
        """
        stmt = pg_insert(StudyTimeEntry).values(
            user_id=user_id,
            subject_id=subject_id,
            study_date=day,
            study_minutes=minutes,
            number_of_completed_topics=completed_topics,
        )
        return stmt.on_conflict_do_update(
            index_elements=["user_id", "subject_id", "study_date"],
            set_={
                "study_minutes": StudyTimeEntry.study_minutes
                + stmt.excluded.study_minutes,
                "number_of_completed_topics": StudyTimeEntry.number_of_completed_topics
                + stmt.excluded.number_of_completed_topics,
                "updated_at": func.now(),
            },
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_today_total(
        self, user_id: UUID, day: Optional[date] = None
    ) -> TodayStudyTime:
        """
        Sum the user's minutes for today across all subjects.

        Returns:
            TodayStudyTime with local-midnight epoch ms; total is 0 when
            nothing was recorded.
        """
        day = day or day_buckets.today()
        result = await self.db.execute(
            select(func.coalesce(func.sum(StudyTimeEntry.study_minutes), 0)).where(
                StudyTimeEntry.user_id == user_id,
                StudyTimeEntry.study_date == day,
            )
        )
        total = result.scalar_one() or 0

        return TodayStudyTime(
            date=day_buckets.day_start_epoch_ms(day),
            total_study_minutes=int(total),
        )

    async def get_weekly_focus_distribution(
        self, user_id: UUID, day: Optional[date] = None
    ) -> list[FocusDay]:
        """
        Hours studied on each day of the current Monday-based week.

        Args:
            user_id: User to summarize.
            day: Any day inside the week (defaults to today).

        Returns:
            Exactly seven FocusDay entries, Mon..Sun.

        Raises:
            NotFoundError: If the user doesn't exist.
        """
        day = day or day_buckets.today()
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")

        start, end = day_buckets.week_window(day)
        result = await self.db.execute(
            select(StudyTimeEntry.study_date, func.sum(StudyTimeEntry.study_minutes))
            .where(
                StudyTimeEntry.user_id == user_id,
                StudyTimeEntry.study_date >= start,
                StudyTimeEntry.study_date < end,
            )
            .group_by(StudyTimeEntry.study_date)
        )
        totals = {study_date: minutes for study_date, minutes in result.all()}

        return self._build_week_distribution(
            start, totals, self._goal_hours(user.study_minutes)
        )

    async def get_weekly_mastery(
        self, user_id: UUID, day: Optional[date] = None
    ) -> WeeklyMasteryResponse:
        """
        Per-subject hours for the seven days ending today, with completion.

        Subjects that no longer exist are left out of ``subjects`` but still
        count toward ``total_hours``.
        """
        day = day or day_buckets.today()
        start, end = day_buckets.trailing_week_window(day)

        result = await self.db.execute(
            select(StudyTimeEntry.subject_id, func.sum(StudyTimeEntry.study_minutes))
            .where(
                StudyTimeEntry.user_id == user_id,
                StudyTimeEntry.study_date >= start,
                StudyTimeEntry.study_date < end,
            )
            .group_by(StudyTimeEntry.subject_id)
        )
        stats = [(subject_id, int(minutes)) for subject_id, minutes in result.all()]

        subjects: Sequence[Subject] = []
        if stats:
            subject_result = await self.db.execute(
                select(Subject).where(
                    Subject.id.in_([subject_id for subject_id, _ in stats]),
                    Subject.user_id == user_id,
                )
            )
            subjects = subject_result.scalars().all()

        return self._build_mastery(stats, subjects)

    async def get_day_totals_by_user(self, day: date) -> dict[UUID, int]:
        """
        Total minutes per user for one day.

        Users without any entry for the day are absent from the mapping.
        """
        result = await self.db.execute(
            select(StudyTimeEntry.user_id, func.sum(StudyTimeEntry.study_minutes))
            .where(StudyTimeEntry.study_date == day)
            .group_by(StudyTimeEntry.user_id)
        )
        return {user_id: int(minutes) for user_id, minutes in result.all()}

    async def get_daily_totals_by_user(
        self, start: date, end: date
    ) -> dict[UUID, dict[date, int]]:
        """
        Total minutes per user per day for ``start`` through ``end`` inclusive.

        Days without entries are absent from each user's mapping.
        """
        result = await self.db.execute(
            select(
                StudyTimeEntry.user_id,
                StudyTimeEntry.study_date,
                func.sum(StudyTimeEntry.study_minutes),
            )
            .where(StudyTimeEntry.study_date.between(start, end))
            .group_by(StudyTimeEntry.user_id, StudyTimeEntry.study_date)
        )
        totals: dict[UUID, dict[date, int]] = {}
        for user_id, study_date, minutes in result.all():
            totals.setdefault(user_id, {})[study_date] = int(minutes)
        return totals

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _goal_hours(goal_minutes: int) -> float:
        """Daily goal in hours, falling back to the configured default."""
        if goal_minutes and goal_minutes > 0:
            return day_buckets.minutes_to_hours(goal_minutes)
        return settings.WEEKLY_FOCUS_DEFAULT_GOAL_HOURS

    @staticmethod
    def _build_week_distribution(
        week_start: date, totals: dict[date, int], goal_hours: float
    ) -> list[FocusDay]:
        """
        Lay out one FocusDay per weekday starting at ``week_start``.

        Args:
            week_start: Monday of the week.
            totals: Minutes per day; days without data may be missing.
            goal_hours: Goal line shown on every day.

        Returns:
            list[FocusDay]: Seven entries in Mon..Sun order.
        """
        distribution = []
        for offset, label in enumerate(WeekDay):
            current = week_start + timedelta(days=offset)
            minutes = totals.get(current, 0) or 0
            distribution.append(
                FocusDay(
                    name=label.value,
                    hours=day_buckets.minutes_to_hours(minutes),
                    goal=goal_hours,
                )
            )
        return distribution

    @staticmethod
    def _build_mastery(
        stats: Iterable[tuple[UUID, int]], subjects: Iterable[Subject]
    ) -> WeeklyMasteryResponse:
        """
        Combine per-subject minute totals with subject completion.

        Args:
            stats: (subject_id, minutes) pairs.
            subjects: Subjects that still exist.

        Returns:
            WeeklyMasteryResponse; total_hours is rounded from the raw
            minute sum, not summed from rounded per-subject hours.
        """
        stats = list(stats)
        by_id = {subject.id: subject for subject in subjects}
        total_minutes = sum(minutes for _, minutes in stats)

        entries = []
        for subject_id, minutes in stats:
            subject = by_id.get(subject_id)
            if subject is None:
                continue
            completion = compute_completion(subject.chapters or [])
            entries.append(
                SubjectMastery(
                    subject_name=subject.subject_name,
                    hours=day_buckets.minutes_to_hours(minutes),
                    percent=completion.completion_percentage,
                )
            )

        return WeeklyMasteryResponse(
            total_hours=day_buckets.minutes_to_hours(total_minutes),
            subjects=entries,
        )
