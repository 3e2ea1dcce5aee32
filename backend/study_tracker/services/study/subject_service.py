"""
Subject Service

Owns the subject documents: bulk import, listing, progress and completion
updates. Every lookup is scoped to the requesting user.

Usage:
    from study_tracker.services.study.subject_service import SubjectService

    service = SubjectService(db)
    progress = await service.get_subject_progress(user_id, subject_id)
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.db.models import Subject
from study_tracker.middleware.error_handling import NotFoundError
from study_tracker.models.study import (
    CreateAssignmentRequest,
    CreateAssignmentResponse,
    SubjectListResponse,
    SubjectProgressResponse,
    SubjectResponse,
    SubjectSummary,
    SubtopicRef,
    UpdateCompletedTopicsRequest,
)
from study_tracker.services.study.progress import (
    compute_completion,
    mark_completed,
    merge_completion_tree,
)

logger = logging.getLogger(__name__)


class SubjectService:
    """Service for subject documents and their chapter trees."""

    def __init__(self, db: AsyncSession):
        """
        Initialize the subject service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    async def create_assignment(
        self, user_id: UUID, request: CreateAssignmentRequest
    ) -> CreateAssignmentResponse:
        """
        Insert one subject per entry, owned by the user.

        ``total_chapter`` is fixed to the chapter count at creation.
        """
        subjects = [
            Subject(
                user_id=user_id,
                subject_name=entry.subject_name,
                total_chapter=len(entry.chapters),
                chapters=[chapter.model_dump() for chapter in entry.chapters],
            )
            for entry in request.subjects
        ]
        self.db.add_all(subjects)
        await self.db.commit()

        logger.info(f"Imported {len(subjects)} subjects for user {user_id}")
        return CreateAssignmentResponse(
            message="Subjects inserted successfully",
            inserted_count=len(subjects),
        )

    async def get_subjects(self, user_id: UUID) -> list[SubjectResponse]:
        """Return every subject document owned by the user."""
        result = await self.db.execute(
            select(Subject)
            .where(Subject.user_id == user_id)
            .order_by(Subject.created_at)
        )
        return [SubjectResponse.model_validate(s) for s in result.scalars().all()]

    async def list_subjects(self, user_id: UUID) -> SubjectListResponse:
        """Return per-subject completion counts for the user's subjects."""
        result = await self.db.execute(
            select(Subject)
            .where(Subject.user_id == user_id)
            .order_by(Subject.created_at)
        )

        summaries = []
        for subject in result.scalars().all():
            stats = compute_completion(subject.chapters or [])
            summaries.append(
                SubjectSummary(
                    id=subject.id,
                    name=subject.subject_name,
                    total_chapters=subject.total_chapter,
                    completed=stats.completed_topics,
                    incompleted=stats.remaining_topics,
                )
            )
        return SubjectListResponse(subjects=summaries)

    async def get_subject_progress(
        self, user_id: UUID, subject_id: UUID
    ) -> SubjectProgressResponse:
        """
        Completion statistics for one subject.

        Raises:
            NotFoundError: If the subject doesn't exist for this user.
        """
        subject = await self._get_owned_subject(user_id, subject_id)
        stats = compute_completion(subject.chapters or [])

        return SubjectProgressResponse(
            subject_name=subject.subject_name,
            total_chapters=subject.total_chapter,
            **stats.model_dump(),
        )

    async def mark_subtopics_completed(
        self, user_id: UUID, subject_id: UUID, refs: list[SubtopicRef]
    ) -> SubjectResponse:
        """
        Mark individual subtopics as completed.

        Raises:
            NotFoundError: If the subject doesn't exist for this user.
            ValidationError: If a reference is out of range.
        """
        subject = await self._get_owned_subject(user_id, subject_id)
        chapters, changed = mark_completed(subject.chapters or [], refs)
        return await self._save_chapters(subject, chapters, changed)

    async def update_completed_topics(
        self, user_id: UUID, request: UpdateCompletedTopicsRequest
    ) -> SubjectResponse:
        """
        Apply a full chapter tree sent back by the client.

        Only incomplete → complete transitions are applied; structural edits
        and un-completing a subtopic are rejected.

        Raises:
            NotFoundError: If the subject doesn't exist for this user.
            ValidationError: If the submitted tree is not a legal update.
        """
        subject = await self._get_owned_subject(user_id, request.id)
        submitted = [chapter.model_dump() for chapter in request.chapters]
        chapters, changed = merge_completion_tree(subject.chapters or [], submitted)
        return await self._save_chapters(subject, chapters, changed)

    async def _save_chapters(
        self, subject: Subject, chapters: list[dict], changed: int
    ) -> SubjectResponse:
        if changed:
            # Reassign so the JSON column is flagged dirty
            subject.chapters = chapters
            await self.db.commit()
            await self.db.refresh(subject)
            logger.info(f"Marked {changed} subtopics completed in subject {subject.id}")

        return SubjectResponse.model_validate(subject)

    async def _get_owned_subject(self, user_id: UUID, subject_id: UUID) -> Subject:
        result = await self.db.execute(
            select(Subject).where(Subject.id == subject_id, Subject.user_id == user_id)
        )
        subject = result.scalar_one_or_none()
        if subject is None:
            raise NotFoundError(
                "Subject not found", details={"subject_id": str(subject_id)}
            )
        return subject
