"""
SQLAlchemy Database Models

Tables:
- users: Accounts with daily study goal and streak counter
- subjects: Study subjects with an embedded chapter/subtopic tree
- study_time_entries: One accumulated row per (user, subject, day)

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    There is a corresponding Pydantic file: study_tracker/models/study.py

    Data flows: Service Layer → Pydantic → SQLAlchemy → Database
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from study_tracker.db.base import Base


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class User(Base):
    """
    Application user.

    Attributes:
        id: Primary key (UUID).
        name: Display name.
        email: Login email, unique.
        password_hash: passlib hash of the password.
        streak: Consecutive days the daily goal was met. Maintained by the
            nightly streak job.
        study_minutes: Daily study goal in minutes.
        studied_minutes: Minutes studied so far today. Incremented on every
            study session and refreshed by the nightly job.
        streak_evaluated_on: Last day the nightly job evaluated for this
            user. Keeps the job from counting a day twice.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    streak: Mapped[int] = mapped_column(Integer, default=0)
    study_minutes: Mapped[int] = mapped_column(Integer, default=0)
    studied_minutes: Mapped[int] = mapped_column(Integer, default=0)
    streak_evaluated_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


class Subject(Base):
    """
    A subject owned by one user.

    Chapters are embedded value objects stored as JSON:

        [{"name": str, "section": str,
          "subtopics": [{"name": str, "is_completed": bool}, ...]}, ...]

    Attributes:
        id: Primary key (UUID).
        user_id: Owning user.
        subject_name: Display name.
        total_chapter: Chapter count at creation time.
        chapters: Ordered chapter tree (see above).
    """

    __tablename__ = "subjects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    subject_name: Mapped[str] = mapped_column(String(200))
    total_chapter: Mapped[int] = mapped_column(Integer)
    chapters: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


class StudyTimeEntry(Base):
    """
    Accumulated study time for one (user, subject, day) bucket.

    Rows are only ever written through the ON CONFLICT upsert in
    TimeTrackingService, which increments the counters in place.

    Attributes:
        user_id: Owning user.
        subject_id: Studied subject. Not a foreign key: entries outlive
            deleted subjects and are filtered out at read time.
        study_date: Calendar day in the configured study timezone.
        study_minutes: Minutes accumulated for the day.
        number_of_completed_topics: Subtopics completed during the day.
    """

    __tablename__ = "study_time_entries"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "subject_id",
            "study_date",
            name="uq_study_time_user_subject_day",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    study_date: Mapped[date] = mapped_column(Date, index=True)

    study_minutes: Mapped[int] = mapped_column(Integer, default=0)
    number_of_completed_topics: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )
