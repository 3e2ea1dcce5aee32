"""
Pydantic models for API request/response validation.

Usage:
    from study_tracker.models import SubjectResponse, TodayStudyTime
"""

from study_tracker.models.auth import CreateUserRequest, LoginRequest, TokenResponse
from study_tracker.models.base import (
    MessageResponse,
    StatusResponse,
    StrictRequest,
    StrictResponse,
)
from study_tracker.models.study import (
    ChapterModel,
    CompletionStats,
    CreateAssignmentRequest,
    CreateAssignmentResponse,
    FocusDay,
    MarkSubtopicsRequest,
    StreakResponse,
    StreakUpdateSummary,
    StudyGoalRequest,
    StudyGoalResponse,
    StudyTimeUpdateRequest,
    SubjectCreate,
    SubjectListResponse,
    SubjectMastery,
    SubjectProgressResponse,
    SubjectResponse,
    SubjectSummary,
    SubtopicModel,
    SubtopicRef,
    TodayStudyTime,
    UpdateCompletedTopicsRequest,
    WeeklyMasteryResponse,
)

__all__ = [
    # Base
    "MessageResponse",
    "StatusResponse",
    "StrictRequest",
    "StrictResponse",
    # Auth
    "CreateUserRequest",
    "LoginRequest",
    "TokenResponse",
    # Subjects
    "ChapterModel",
    "CreateAssignmentRequest",
    "CreateAssignmentResponse",
    "SubjectCreate",
    "SubjectListResponse",
    "SubjectResponse",
    "SubjectSummary",
    "SubtopicModel",
    # Progress
    "CompletionStats",
    "MarkSubtopicsRequest",
    "SubjectProgressResponse",
    "SubtopicRef",
    "UpdateCompletedTopicsRequest",
    # Study time & analytics
    "FocusDay",
    "StudyTimeUpdateRequest",
    "SubjectMastery",
    "TodayStudyTime",
    "WeeklyMasteryResponse",
    # Goal & streak
    "StreakResponse",
    "StreakUpdateSummary",
    "StudyGoalRequest",
    "StudyGoalResponse",
]
