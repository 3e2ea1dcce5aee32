"""
Study Tracking API Models (Pydantic)

Request/response schemas for subjects, study time, goals and analytics:
- Subject chapter/subtopic trees (also the stored JSON shape)
- Study session recording and daily totals
- Weekly focus distribution and weekly mastery
- Study goal and streak

ARCHITECTURE NOTE:
    This file contains PYDANTIC models for API validation.
    There is a corresponding SQLAlchemy file: study_tracker/db/models.py

    Data flows: API Request → Pydantic → Service → SQLAlchemy → Database

API Contract:
    Request models use StrictRequest (extra="forbid") to reject unknown fields.
    All JSON keys are camelCase aliases of the snake_case field names.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from study_tracker.models.base import StrictRequest, StrictResponse


# ===========================================
# Subject Tree Models
# ===========================================


class SubtopicModel(StrictRequest):
    """A single subtopic inside a chapter."""

    name: str = Field(..., min_length=1)
    is_completed: bool = False


class ChapterModel(StrictRequest):
    """
    A chapter with its ordered subtopics.

    ``model_dump()`` (field names, snake_case) is the shape persisted in
    ``Subject.chapters``.
    """

    name: str = Field(..., min_length=1)
    section: str = Field(..., min_length=1)
    subtopics: list[SubtopicModel] = Field(..., min_length=1)


class SubjectCreate(StrictRequest):
    """One subject inside an assignment import."""

    subject_name: str = Field(..., min_length=1, max_length=200)
    chapters: list[ChapterModel] = Field(..., min_length=1)


class CreateAssignmentRequest(StrictRequest):
    """Bulk subject import."""

    subjects: list[SubjectCreate] = Field(..., min_length=1)


class CreateAssignmentResponse(StrictResponse):
    """Result of a bulk subject import."""

    message: str
    inserted_count: int


class SubjectResponse(StrictResponse):
    """Full subject document."""

    id: UUID
    subject_name: str
    total_chapter: int
    chapters: list[ChapterModel]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubjectSummary(StrictResponse):
    """Per-subject completion counts for the subject list."""

    id: UUID
    name: str
    total_chapters: int
    completed: int
    incompleted: int


class SubjectListResponse(StrictResponse):
    """Subjects owned by the current user."""

    subjects: list[SubjectSummary]


# ===========================================
# Progress Models
# ===========================================


class CompletionStats(StrictResponse):
    """
    Completion counts for a subject's chapter tree.

    completion_percentage is always within [0, 100] and is 0 when the
    subject has no subtopics.
    """

    total_topics: int
    completed_topics: int
    remaining_topics: int
    completion_percentage: int = Field(..., ge=0, le=100)


class SubjectProgressResponse(CompletionStats):
    """Completion counts plus subject identity."""

    subject_name: str
    total_chapters: int


class SubtopicRef(StrictRequest):
    """Positional address of a subtopic inside a subject."""

    chapter_index: int = Field(..., ge=0)
    subtopic_index: int = Field(..., ge=0)


class MarkSubtopicsRequest(StrictRequest):
    """Subtopics to mark as completed."""

    subtopics: list[SubtopicRef] = Field(..., min_length=1)


class UpdateCompletedTopicsRequest(StrictRequest):
    """
    Full subject document sent back by the study timer.

    Only ``isCompleted`` flips from false to true are accepted; anything
    else is rejected by SubjectService.update_completed_topics. The echoed
    metadata fields are accepted but ignored; ownership comes from the token.
    """

    id: UUID
    chapters: list[ChapterModel] = Field(..., min_length=1)
    subject_name: Optional[str] = None
    total_chapter: Optional[int] = None
    user_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ===========================================
# Study Time Models
# ===========================================


class StudyTimeUpdateRequest(StrictRequest):
    """Minutes studied in one session, added to today's bucket."""

    minutes: int = Field(..., gt=0)
    subject_id: UUID
    number_of_completed_topics: int = Field(0, ge=0)


class TodayStudyTime(StrictResponse):
    """Total minutes studied today across all subjects."""

    date: int  # Epoch milliseconds of local midnight
    total_study_minutes: int


class FocusDay(StrictResponse):
    """One bar of the weekly focus chart."""

    name: str
    hours: float
    goal: float


class SubjectMastery(StrictResponse):
    """Hours studied in the trailing week plus completion for one subject."""

    subject_name: str
    hours: float
    percent: int


class WeeklyMasteryResponse(StrictResponse):
    """Trailing-week study time per subject."""

    total_hours: float
    subjects: list[SubjectMastery]


# ===========================================
# Goal & Streak Models
# ===========================================


class StudyGoalRequest(StrictRequest):
    """Daily study goal, sent as ``{"min": 120}``."""

    minutes: int = Field(..., alias="min", ge=0)


class StudyGoalResponse(StrictResponse):
    """Current daily study goal."""

    minutes: int


class StreakResponse(StrictResponse):
    """Current streak in days."""

    streak: int


class StreakUpdateSummary(StrictResponse):
    """Outcome of one run of the nightly streak job."""

    day: date
    processed: int = 0
    incremented: int = 0
    reset: int = 0
    failed: int = 0
