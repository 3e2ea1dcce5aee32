"""
Subjects API Router

Endpoints for study goals, study time, analytics and subject progress.
All endpoints require a bearer token and act on the token's user.

Endpoints:
- POST /api/subjects/studyGoal - Set the daily study goal
- GET /api/subjects/studyGoal - Get the daily study goal
- GET /api/subjects/streak - Get the current streak
- GET /api/subjects/list - Completion counts per subject
- GET /api/subjects/totalSubjectsWithData - Full subject documents
- GET /api/subjects/{subject_id}/progress - Completion for one subject
- POST /api/subjects/studyTimeUpdate - Record a study session
- GET /api/subjects/studyTime - Minutes studied today
- GET /api/subjects/weekly-focus - Hours per weekday this week
- GET /api/subjects/weekly-mastery - Hours and completion per subject, last 7 days
- PUT /api/subjects/completedTopics - Apply a chapter tree with newly completed subtopics
- POST /api/subjects/{subject_id}/subtopics/complete - Mark subtopics completed
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from study_tracker.dependencies import (
    CurrentUserId,
    get_streak_service,
    get_subject_service,
    get_time_tracking_service,
)
from study_tracker.middleware.error_handling import handle_endpoint_errors
from study_tracker.models.base import MessageResponse, StatusResponse
from study_tracker.models.study import (
    FocusDay,
    MarkSubtopicsRequest,
    StreakResponse,
    StudyGoalRequest,
    StudyGoalResponse,
    StudyTimeUpdateRequest,
    SubjectListResponse,
    SubjectProgressResponse,
    SubjectResponse,
    TodayStudyTime,
    UpdateCompletedTopicsRequest,
    WeeklyMasteryResponse,
)
from study_tracker.services.study import (
    StreakTrackingService,
    SubjectService,
    TimeTrackingService,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/subjects", tags=["subjects"])


# ===========================================
# Goal & Streak Endpoints
# ===========================================


@router.post("/studyGoal", response_model=StatusResponse)
@handle_endpoint_errors("Set study goal")
async def set_study_goal(
    body: StudyGoalRequest,
    user_id: UUID = CurrentUserId,
    service: StreakTrackingService = Depends(get_streak_service),
) -> StatusResponse:
    """Overwrite the daily study goal (minutes, >= 0)."""
    return await service.set_study_goal(user_id, body.minutes)


@router.get("/studyGoal", response_model=StudyGoalResponse)
@handle_endpoint_errors("Get study goal")
async def get_study_goal(
    user_id: UUID = CurrentUserId,
    service: StreakTrackingService = Depends(get_streak_service),
) -> StudyGoalResponse:
    return await service.get_study_goal(user_id)


@router.get("/streak", response_model=StreakResponse)
@handle_endpoint_errors("Get streak")
async def get_streak(
    user_id: UUID = CurrentUserId,
    service: StreakTrackingService = Depends(get_streak_service),
) -> StreakResponse:
    """
    Get the consecutive-day streak.

    The streak is updated by the nightly job, not by study sessions.
    """
    return await service.get_streak(user_id)


# ===========================================
# Subject Endpoints
# ===========================================


@router.get("/list", response_model=SubjectListResponse)
@handle_endpoint_errors("List subjects")
async def list_subjects(
    user_id: UUID = CurrentUserId,
    service: SubjectService = Depends(get_subject_service),
) -> SubjectListResponse:
    return await service.list_subjects(user_id)


@router.get("/totalSubjectsWithData", response_model=list[SubjectResponse])
@handle_endpoint_errors("Get subjects")
async def total_subjects_with_data(
    user_id: UUID = CurrentUserId,
    service: SubjectService = Depends(get_subject_service),
) -> list[SubjectResponse]:
    """Full subject documents including chapter trees."""
    return await service.get_subjects(user_id)


@router.get("/{subject_id}/progress", response_model=SubjectProgressResponse)
@handle_endpoint_errors("Get subject progress")
async def get_subject_progress(
    subject_id: UUID,
    user_id: UUID = CurrentUserId,
    service: SubjectService = Depends(get_subject_service),
) -> SubjectProgressResponse:
    """
    Get completion statistics for a subject.

    Returns total, completed and remaining subtopics plus the rounded
    completion percentage (0 for subjects without subtopics).
    """
    return await service.get_subject_progress(user_id, subject_id)


@router.put("/completedTopics", response_model=SubjectResponse)
@handle_endpoint_errors("Update completed topics")
async def update_completed_topics(
    body: UpdateCompletedTopicsRequest,
    user_id: UUID = CurrentUserId,
    service: SubjectService = Depends(get_subject_service),
) -> SubjectResponse:
    """
    Apply the subject's chapter tree as edited by the study timer.

    The tree must match the stored structure; only subtopics going from
    incomplete to complete are applied. Anything else returns 422.
    """
    return await service.update_completed_topics(user_id, body)


@router.post("/{subject_id}/subtopics/complete", response_model=SubjectResponse)
@handle_endpoint_errors("Mark subtopics completed")
async def mark_subtopics_completed(
    subject_id: UUID,
    body: MarkSubtopicsRequest,
    user_id: UUID = CurrentUserId,
    service: SubjectService = Depends(get_subject_service),
) -> SubjectResponse:
    """Mark subtopics completed by (chapterIndex, subtopicIndex)."""
    return await service.mark_subtopics_completed(user_id, subject_id, body.subtopics)


# ===========================================
# Study Time Endpoints
# ===========================================


@router.post("/studyTimeUpdate", response_model=MessageResponse)
@handle_endpoint_errors("Update study time")
async def update_study_time(
    body: StudyTimeUpdateRequest,
    user_id: UUID = CurrentUserId,
    service: TimeTrackingService = Depends(get_time_tracking_service),
) -> MessageResponse:
    """
    Add a finished session to today's bucket for the subject.

    Repeated sessions on the same day accumulate into one entry.
    """
    return await service.record_study_session(
        user_id,
        body.subject_id,
        body.minutes,
        body.number_of_completed_topics,
    )


@router.get("/studyTime", response_model=TodayStudyTime)
@handle_endpoint_errors("Get today's study time")
async def get_study_time(
    user_id: UUID = CurrentUserId,
    service: TimeTrackingService = Depends(get_time_tracking_service),
) -> TodayStudyTime:
    return await service.get_today_total(user_id)


@router.get("/weekly-focus", response_model=list[FocusDay])
@handle_endpoint_errors("Get weekly focus")
async def get_weekly_focus_distribution(
    user_id: UUID = CurrentUserId,
    service: TimeTrackingService = Depends(get_time_tracking_service),
) -> list[FocusDay]:
    """Hours studied on each day of the current week, Monday first."""
    return await service.get_weekly_focus_distribution(user_id)


@router.get("/weekly-mastery", response_model=WeeklyMasteryResponse)
@handle_endpoint_errors("Get weekly mastery")
async def get_weekly_mastery(
    user_id: UUID = CurrentUserId,
    service: TimeTrackingService = Depends(get_time_tracking_service),
) -> WeeklyMasteryResponse:
    """
    Hours per subject over the last seven days with completion percentages.

    Subjects deleted since they were studied are omitted.
    """
    return await service.get_weekly_mastery(user_id)
