"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across unit and integration tests.
"""

import os
import sys
import uuid
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env file from project root so POSTGRES_TEST_* variables are available
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


# ============================================================================
# Environment Configuration
# ============================================================================

# Settings are read when study_tracker.config is first imported, which
# happens at test collection, so the test environment is applied here
# rather than in a fixture.
os.environ.update(
    {
        "DEBUG": "false",
        "RATE_LIMIT_ENABLED": "false",
        "STUDY_TIMEZONE": "UTC",
        "JWT_SECRET_KEY": "test-secret-key-0123456789",
        "POSTGRES_USER": os.environ.get("POSTGRES_TEST_USER", "testuser"),
        "POSTGRES_PASSWORD": os.environ.get("POSTGRES_TEST_PASSWORD", "testpass"),
        "POSTGRES_DB": os.environ.get("POSTGRES_TEST_DB", "testdb"),
    }
)


# ============================================================================
# Identity Fixtures
# ============================================================================


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def subject_id() -> uuid.UUID:
    return uuid.uuid4()


# ============================================================================
# Sample Data
# ============================================================================


@pytest.fixture
def sample_chapters() -> list[dict[str, Any]]:
    """
    Two chapters with three subtopics each, four of them completed.

    Stored (snake_case) form of Subject.chapters.
    """
    return [
        {
            "name": "Limits",
            "section": "Calculus I",
            "subtopics": [
                {"name": "Definition", "is_completed": True},
                {"name": "One-sided limits", "is_completed": True},
                {"name": "Continuity", "is_completed": True},
            ],
        },
        {
            "name": "Derivatives",
            "section": "Calculus I",
            "subtopics": [
                {"name": "Power rule", "is_completed": True},
                {"name": "Chain rule", "is_completed": False},
                {"name": "Implicit differentiation", "is_completed": False},
            ],
        },
    ]


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_db() -> MagicMock:
    """
    Create a mock async database session for unit testing.
    """
    mock = MagicMock()
    mock.execute = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.commit = AsyncMock()
    mock.rollback = AsyncMock()
    mock.refresh = AsyncMock()
    mock.close = AsyncMock()
    mock.add = MagicMock()
    mock.add_all = MagicMock()
    return mock


def _make_result(
    scalar: Any = None,
    rows: list[Any] | None = None,
    scalars: list[Any] | None = None,
) -> MagicMock:
    """
    Build a mock SQLAlchemy Result.

    Args:
        scalar: Value for scalar_one() / scalar_one_or_none().
        rows: Value for all().
        scalars: Value for scalars().all().
    """
    result = MagicMock()
    result.scalar_one.return_value = scalar
    result.scalar_one_or_none.return_value = scalar
    result.all.return_value = rows or []
    result.scalars.return_value.all.return_value = scalars or []
    return result


@pytest.fixture
def make_result():
    """Factory for mock SQLAlchemy results (see _make_result)."""
    return _make_result
