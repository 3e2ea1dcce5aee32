"""
Assignment API Router

Endpoints:
- POST /api/assignment/createAssignment - Bulk-import subjects
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from study_tracker.dependencies import CurrentUserId, get_subject_service
from study_tracker.middleware.error_handling import handle_endpoint_errors
from study_tracker.models.study import CreateAssignmentRequest, CreateAssignmentResponse
from study_tracker.services.study import SubjectService

router = APIRouter(prefix="/api/assignment", tags=["assignment"])


@router.post("/createAssignment", response_model=CreateAssignmentResponse)
@handle_endpoint_errors("Create assignment")
async def create_assignment(
    body: CreateAssignmentRequest,
    user_id: UUID = CurrentUserId,
    service: SubjectService = Depends(get_subject_service),
) -> CreateAssignmentResponse:
    """
    Import subjects with their chapter trees.

    Each subject's chapter count is recorded at creation.
    """
    return await service.create_assignment(user_id, body)
