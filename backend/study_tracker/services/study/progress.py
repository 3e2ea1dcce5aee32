"""
Progress Calculator

Computes completion statistics for a subject's chapter/subtopic tree and
applies completion updates to it.

The tree is handled in its stored form (see ``Subject.chapters``):

    [{"name": str, "section": str,
      "subtopics": [{"name": str, "is_completed": bool}, ...]}, ...]

Everything in this module is pure: callers fetch and persist the subject.
"""

import copy
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from study_tracker.middleware.error_handling import ValidationError
from study_tracker.models.study import CompletionStats, SubtopicRef


def completion_percentage(completed: int, total: int) -> int:
    """
    Percentage of completed topics, rounded half-up to an integer.

    Returns 0 when there are no topics.
    """
    if total <= 0:
        return 0
    percent = Decimal(completed * 100) / Decimal(total)
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_completion(chapters: Sequence[dict[str, Any]]) -> CompletionStats:
    """
    Count total and completed subtopics across all chapters.

    Args:
        chapters: Stored chapter tree of a subject.

    Returns:
        CompletionStats with totals and the rounded percentage.
    """
    total = 0
    completed = 0
    for chapter in chapters:
        for subtopic in chapter.get("subtopics", []):
            total += 1
            if subtopic.get("is_completed", False):
                completed += 1

    return CompletionStats(
        total_topics=total,
        completed_topics=completed,
        remaining_topics=total - completed,
        completion_percentage=completion_percentage(completed, total),
    )


def mark_completed(
    chapters: Sequence[dict[str, Any]], refs: Iterable[SubtopicRef]
) -> tuple[list[dict[str, Any]], int]:
    """
    Mark the addressed subtopics as completed.

    Already-completed subtopics are left alone, so repeating a request is
    harmless.

    Args:
        chapters: Stored chapter tree (not modified).
        refs: Positions of the subtopics to complete.

    Returns:
        tuple: (new chapter tree, number of subtopics that changed state)

    Raises:
        ValidationError: If a reference points outside the tree.
    """
    updated = copy.deepcopy(list(chapters))
    newly_completed = 0

    for ref in refs:
        if ref.chapter_index >= len(updated):
            raise ValidationError(
                f"Chapter index {ref.chapter_index} out of range",
                details={"chapter_index": ref.chapter_index},
            )
        subtopics = updated[ref.chapter_index].get("subtopics", [])
        if ref.subtopic_index >= len(subtopics):
            raise ValidationError(
                f"Subtopic index {ref.subtopic_index} out of range "
                f"in chapter {ref.chapter_index}",
                details={
                    "chapter_index": ref.chapter_index,
                    "subtopic_index": ref.subtopic_index,
                },
            )
        subtopic = subtopics[ref.subtopic_index]
        if not subtopic.get("is_completed", False):
            subtopic["is_completed"] = True
            newly_completed += 1

    return updated, newly_completed


def merge_completion_tree(
    current: Sequence[dict[str, Any]], submitted: Sequence[dict[str, Any]]
) -> tuple[list[dict[str, Any]], int]:
    """
    Apply a client-submitted tree, allowing only incomplete → complete flips.

    The submitted tree must have the same chapters (name, section) and the
    same subtopic names in the same order as the stored tree.

    Args:
        current: Stored chapter tree.
        submitted: Chapter tree sent by the client.

    Returns:
        tuple: (new chapter tree, number of subtopics that changed state)

    Raises:
        ValidationError: On any structural change or a completed subtopic
            being marked incomplete.
    """
    if len(submitted) != len(current):
        raise ValidationError(
            "Chapter structure cannot be changed",
            details={"expected_chapters": len(current), "got": len(submitted)},
        )

    refs: list[SubtopicRef] = []
    for ci, (old, new) in enumerate(zip(current, submitted)):
        if old.get("name") != new.get("name") or old.get("section") != new.get(
            "section"
        ):
            raise ValidationError(
                f"Chapter {ci} does not match the stored subject",
                details={"chapter_index": ci},
            )

        old_subtopics = old.get("subtopics", [])
        new_subtopics = new.get("subtopics", [])
        if [s.get("name") for s in old_subtopics] != [
            s.get("name") for s in new_subtopics
        ]:
            raise ValidationError(
                f"Subtopics of chapter {ci} cannot be changed",
                details={"chapter_index": ci},
            )

        for si, (old_sub, new_sub) in enumerate(zip(old_subtopics, new_subtopics)):
            was_done = old_sub.get("is_completed", False)
            is_done = new_sub.get("is_completed", False)
            if was_done and not is_done:
                raise ValidationError(
                    "Completed subtopics cannot be marked incomplete",
                    details={"chapter_index": ci, "subtopic_index": si},
                )
            if is_done and not was_done:
                refs.append(SubtopicRef(chapter_index=ci, subtopic_index=si))

    return mark_completed(current, refs)
