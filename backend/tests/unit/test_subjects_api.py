"""
Unit tests for the HTTP surface.

Routes are exercised through TestClient with the services replaced by
AsyncMocks, so no database is needed. Tests for:
- camelCase request parsing and response serialization
- Bearer token enforcement
- Request validation (422) and service error mapping (404, 409, 401)
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from study_tracker.config import settings
from study_tracker.db.base import get_db
from study_tracker.dependencies import (
    get_auth_service,
    get_current_user_id,
    get_streak_service,
    get_subject_service,
    get_time_tracking_service,
)
from study_tracker.main import app
from study_tracker.middleware.error_handling import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
)
from study_tracker.models.auth import TokenResponse
from study_tracker.models.base import MessageResponse, StatusResponse
from study_tracker.models.study import (
    CreateAssignmentResponse,
    FocusDay,
    StreakResponse,
    SubjectListResponse,
    SubjectResponse,
    SubjectSummary,
    TodayStudyTime,
    WeeklyMasteryResponse,
)
from study_tracker.services.auth_service import create_access_token


# =============================================================================
# Fixtures
# =============================================================================


async def _mock_db():
    db = MagicMock()
    db.get = AsyncMock(return_value=None)
    yield db


@pytest.fixture
def services():
    """AsyncMock stand-ins for each service."""
    return {
        "auth": AsyncMock(),
        "time": AsyncMock(),
        "streak": AsyncMock(),
        "subject": AsyncMock(),
    }


@pytest.fixture
def client(services, user_id):
    """TestClient with an authenticated user and mocked services."""
    app.dependency_overrides[get_db] = _mock_db
    app.dependency_overrides[get_current_user_id] = lambda: user_id
    app.dependency_overrides[get_auth_service] = lambda: services["auth"]
    app.dependency_overrides[get_time_tracking_service] = lambda: services["time"]
    app.dependency_overrides[get_streak_service] = lambda: services["streak"]
    app.dependency_overrides[get_subject_service] = lambda: services["subject"]
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(services):
    """TestClient without an authenticated user."""
    app.dependency_overrides[get_db] = _mock_db
    app.dependency_overrides[get_auth_service] = lambda: services["auth"]
    app.dependency_overrides[get_streak_service] = lambda: services["streak"]
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Authentication
# =============================================================================


class TestAuthRoutes:
    """Tests for /api/auth."""

    def test_create_user(self, anonymous_client, services):
        services["auth"].create_user.return_value = StatusResponse(
            status=202, message="User created successfully"
        )

        response = anonymous_client.post(
            "/api/auth/createUser",
            json={"name": "Ada", "email": "ada@example.com", "password": "pw"},
        )

        assert response.status_code == 200
        assert response.json() == {"status": 202, "message": "User created successfully"}

    def test_create_user_invalid_email(self, anonymous_client, services):
        response = anonymous_client.post(
            "/api/auth/createUser",
            json={"name": "Ada", "email": "not-an-email", "password": "pw"},
        )

        assert response.status_code == 422
        services["auth"].create_user.assert_not_awaited()

    def test_create_user_conflict(self, anonymous_client, services):
        services["auth"].create_user.side_effect = ConflictError("Email already registered")

        response = anonymous_client.post(
            "/api/auth/createUser",
            json={"name": "Ada", "email": "ada@example.com", "password": "pw"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_login(self, anonymous_client, services):
        services["auth"].login.return_value = TokenResponse(token="abc.def.ghi")

        response = anonymous_client.post(
            "/api/auth/loginUser", json={"email": "ada@example.com", "password": "pw"}
        )

        assert response.status_code == 200
        assert response.json() == {"token": "abc.def.ghi"}

    def test_login_bad_credentials(self, anonymous_client, services):
        services["auth"].login.side_effect = AuthenticationError("Invalid email or password")

        response = anonymous_client.post(
            "/api/auth/loginUser", json={"email": "ada@example.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"


class TestBearerGuard:
    """Tests for get_current_user_id through protected routes."""

    def test_missing_token(self, anonymous_client, services):
        response = anonymous_client.get("/api/subjects/streak")

        assert response.status_code == 401
        services["streak"].get_streak.assert_not_awaited()

    def test_invalid_token(self, anonymous_client):
        response = anonymous_client.get(
            "/api/subjects/streak", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 401

    def test_token_for_deleted_user(self, anonymous_client, user_id):
        # The mock db returns no user for any id
        token = create_access_token(user_id)

        response = anonymous_client.get(
            "/api/subjects/streak", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401


# =============================================================================
# Goal & Streak
# =============================================================================


class TestGoalRoutes:
    """Tests for study goal and streak endpoints."""

    def test_set_study_goal(self, client, services, user_id):
        services["streak"].set_study_goal.return_value = StatusResponse(
            status=202, message="Study goal updated successfully"
        )

        response = client.post("/api/subjects/studyGoal", json={"min": 120})

        assert response.status_code == 200
        assert response.json()["status"] == 202
        services["streak"].set_study_goal.assert_awaited_once_with(user_id, 120)

    def test_negative_goal_rejected(self, client, services):
        response = client.post("/api/subjects/studyGoal", json={"min": -5})

        assert response.status_code == 422
        services["streak"].set_study_goal.assert_not_awaited()

    def test_unknown_field_rejected(self, client, services):
        response = client.post("/api/subjects/studyGoal", json={"min": 10, "max": 20})

        assert response.status_code == 422

    def test_get_streak(self, client, services):
        services["streak"].get_streak.return_value = StreakResponse(streak=4)

        response = client.get("/api/subjects/streak")

        assert response.json() == {"streak": 4}

    def test_unknown_user(self, client, services):
        services["streak"].get_streak.side_effect = NotFoundError("User not found")

        response = client.get("/api/subjects/streak")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


# =============================================================================
# Study Time
# =============================================================================


class TestStudyTimeRoutes:
    """Tests for study time and analytics endpoints."""

    def test_study_time_update(self, client, services, user_id, subject_id):
        services["time"].record_study_session.return_value = MessageResponse(
            message="time is updated"
        )

        response = client.post(
            "/api/subjects/studyTimeUpdate",
            json={"minutes": 30, "subjectId": str(subject_id), "numberOfCompletedTopics": 1},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "time is updated"}
        services["time"].record_study_session.assert_awaited_once_with(
            user_id, subject_id, 30, 1
        )

    @pytest.mark.parametrize("minutes", [0, -10])
    def test_non_positive_minutes_rejected(self, client, services, subject_id, minutes):
        response = client.post(
            "/api/subjects/studyTimeUpdate",
            json={"minutes": minutes, "subjectId": str(subject_id)},
        )

        assert response.status_code == 422
        services["time"].record_study_session.assert_not_awaited()

    def test_study_time_update_unknown_subject(self, client, services, subject_id):
        services["time"].record_study_session.side_effect = NotFoundError("Subject not found")

        response = client.post(
            "/api/subjects/studyTimeUpdate",
            json={"minutes": 30, "subjectId": str(subject_id)},
        )

        assert response.status_code == 404

    def test_study_time(self, client, services):
        services["time"].get_today_total.return_value = TodayStudyTime(
            date=1704067200000, total_study_minutes=75
        )

        response = client.get("/api/subjects/studyTime")

        assert response.json() == {"date": 1704067200000, "totalStudyMinutes": 75}

    def test_weekly_focus(self, client, services):
        services["time"].get_weekly_focus_distribution.return_value = [
            FocusDay(name=name, hours=0.0, goal=5.0)
            for name in ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        ]

        response = client.get("/api/subjects/weekly-focus")

        body = response.json()
        assert len(body) == 7
        assert body[0] == {"name": "Mon", "hours": 0.0, "goal": 5.0}

    def test_weekly_mastery(self, client, services):
        services["time"].get_weekly_mastery.return_value = WeeklyMasteryResponse(
            total_hours=1.5, subjects=[]
        )

        response = client.get("/api/subjects/weekly-mastery")

        assert response.json() == {"totalHours": 1.5, "subjects": []}


# =============================================================================
# Subjects
# =============================================================================


class TestSubjectRoutes:
    """Tests for subject endpoints."""

    def test_list(self, client, services, subject_id):
        services["subject"].list_subjects.return_value = SubjectListResponse(
            subjects=[
                SubjectSummary(
                    id=subject_id, name="Calculus", total_chapters=2, completed=4, incompleted=2
                )
            ]
        )

        response = client.get("/api/subjects/list")

        assert response.json() == {
            "subjects": [
                {
                    "id": str(subject_id),
                    "name": "Calculus",
                    "totalChapters": 2,
                    "completed": 4,
                    "incompleted": 2,
                }
            ]
        }

    def test_create_assignment(self, client, services):
        services["subject"].create_assignment.return_value = CreateAssignmentResponse(
            message="Subjects inserted successfully", inserted_count=1
        )

        response = client.post(
            "/api/assignment/createAssignment",
            json={
                "subjects": [
                    {
                        "subjectName": "Physics",
                        "chapters": [
                            {
                                "name": "Kinematics",
                                "section": "Mechanics",
                                "subtopics": [{"name": "Velocity"}],
                            }
                        ],
                    }
                ]
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Subjects inserted successfully",
            "insertedCount": 1,
        }

    def test_create_assignment_requires_subtopics(self, client, services):
        response = client.post(
            "/api/assignment/createAssignment",
            json={
                "subjects": [
                    {
                        "subjectName": "Physics",
                        "chapters": [
                            {"name": "Kinematics", "section": "Mechanics", "subtopics": []}
                        ],
                    }
                ]
            },
        )

        assert response.status_code == 422
        services["subject"].create_assignment.assert_not_awaited()

    def test_progress_not_found(self, client, services):
        services["subject"].get_subject_progress.side_effect = NotFoundError(
            "Subject not found"
        )

        response = client.get(f"/api/subjects/{uuid.uuid4()}/progress")

        assert response.status_code == 404

    def test_progress_invalid_id(self, client):
        response = client.get("/api/subjects/not-a-uuid/progress")

        assert response.status_code == 422

    def test_mark_subtopics(self, client, services, user_id, subject_id, sample_chapters):
        now = datetime(2024, 6, 10, tzinfo=timezone.utc)
        services["subject"].mark_subtopics_completed.return_value = SubjectResponse(
            id=subject_id,
            subject_name="Calculus",
            total_chapter=2,
            chapters=sample_chapters,
            created_at=now,
            updated_at=now,
        )

        response = client.post(
            f"/api/subjects/{subject_id}/subtopics/complete",
            json={"subtopics": [{"chapterIndex": 1, "subtopicIndex": 1}]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["subjectName"] == "Calculus"
        assert body["chapters"][0]["subtopics"][0] == {
            "name": "Definition",
            "isCompleted": True,
        }
        refs = services["subject"].mark_subtopics_completed.await_args.args[2]
        assert [(r.chapter_index, r.subtopic_index) for r in refs] == [(1, 1)]


# =============================================================================
# Health
# =============================================================================


class TestHealth:
    """Tests for /api/health."""

    def test_health(self, anonymous_client):
        response = anonymous_client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": settings.APP_NAME}

    def test_ready_when_database_answers(self, anonymous_client):
        db = MagicMock()
        db.execute = AsyncMock()
        app.dependency_overrides[get_db] = lambda: db

        response = anonymous_client.get("/api/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready_without_database(self, anonymous_client):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("refused")))
        app.dependency_overrides[get_db] = lambda: db

        response = anonymous_client.get("/api/health/ready")

        assert response.status_code == 503
        assert response.json()["postgres"]["status"] == "unhealthy"

    def test_detailed_reports_degraded(self, anonymous_client):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("refused")))
        app.dependency_overrides[get_db] = lambda: db

        response = anonymous_client.get("/api/health/detailed")

        body = response.json()
        assert body["status"] == "degraded"
        assert body["dependencies"]["scheduler"]["status"] == "stopped"


class TestCompletedTopicsRoute:
    """Tests for PUT /api/subjects/completedTopics."""

    def test_accepts_echoed_subject_document(
        self, client, services, user_id, subject_id, sample_chapters
    ):
        now = datetime(2024, 6, 10, tzinfo=timezone.utc)
        services["subject"].update_completed_topics.return_value = SubjectResponse(
            id=subject_id,
            subject_name="Calculus",
            total_chapter=2,
            chapters=sample_chapters,
            created_at=now,
            updated_at=now,
        )

        response = client.put(
            "/api/subjects/completedTopics",
            json={
                "id": str(subject_id),
                "subjectName": "Calculus",
                "totalChapter": 2,
                "userId": str(uuid.uuid4()),
                "createdAt": "2024-06-10T00:00:00Z",
                "updatedAt": "2024-06-10T00:00:00Z",
                "chapters": [
                    {
                        "name": "Limits",
                        "section": "Calculus I",
                        "subtopics": [{"name": "Definition", "isCompleted": True}],
                    }
                ],
            },
        )

        assert response.status_code == 200
        called_user, request = services["subject"].update_completed_topics.await_args.args
        assert called_user == user_id
        assert request.id == subject_id
        assert request.chapters[0].subtopics[0].is_completed is True
