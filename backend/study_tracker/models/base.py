"""
Strict Base Model for API Request/Response Validation

This module provides base classes with strict validation settings to harden
the API contract between backend and frontend.

MOTIVATION:
    The dashboard client speaks camelCase JSON (``subjectId``,
    ``totalStudyMinutes``) while Python code uses snake_case. Both base
    classes generate camelCase aliases so the wire format matches the
    client, while services keep constructing models by field name.

Usage:
    # For request bodies (strictest validation)
    class StudyTimeUpdate(StrictRequest):
        minutes: int
        subject_id: UUID          # accepted as "subjectId"

    # For response bodies (allows extra fields from DB)
    class TodayStudyTime(StrictResponse):
        total_study_minutes: int  # emitted as "totalStudyMinutes"

Architecture:
    API Request → StrictRequest (extra="forbid") → Route Handler
    DB Model → StrictResponse (extra="ignore") → API Response
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictRequest(BaseModel):
    """
    Base model for API request bodies with strict validation.

    Rejects any fields not explicitly declared in the model, catching
    frontend typos and mismatches at request time rather than runtime.

    Features:
        - extra="forbid": Unknown fields raise 422 Unprocessable Entity
        - alias_generator=to_camel: JSON keys are camelCase
        - populate_by_name=True: snake_case field names are accepted too
        - str_strip_whitespace=True: Trims whitespace from strings
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )


class StrictResponse(BaseModel):
    """
    Base model for API response bodies.

    More lenient than StrictRequest to allow flexibility in response data.
    FastAPI serializes response models by alias, so fields go out in camelCase.
    """

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        from_attributes=True,
    )


# =============================================================================
# Common Response Patterns
# =============================================================================


class MessageResponse(StrictResponse):
    """Response carrying only a human-readable message."""

    message: str


class StatusResponse(StrictResponse):
    """Status code plus message, as returned by mutation endpoints."""

    status: int
    message: str
