"""
Study Progress Tracker Test Suite

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures and test environment
    ├── unit/                # Unit tests (isolated, mocked database)
    │   ├── test_config.py
    │   ├── test_day_buckets.py
    │   ├── test_progress.py
    │   ├── test_time_tracking.py
    │   ├── test_streak_tracking.py
    │   ├── test_subject_service.py
    │   ├── test_auth_service.py
    │   ├── test_error_handling.py
    │   ├── test_rate_limit.py
    │   ├── test_scheduler.py
    │   └── test_subjects_api.py
    └── integration/         # Integration tests (require PostgreSQL)
        └── test_study_time_api.py

Running Tests:
    # Run all tests
    pytest backend/tests/ -v

    # Run only unit tests (fast, no dependencies)
    pytest backend/tests/unit/ -v

    # Run only integration tests (requires a PostgreSQL test database)
    pytest backend/tests/integration/ -v -m integration
"""
