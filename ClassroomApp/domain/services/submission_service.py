"""Domain service functions for the submission lifecycle: submit, grade, withdraw.

Enforces the policy table:
- Students submit for themselves; Admins and the owning teacher may also submit on
  behalf of a user holding the Student role.
- Only Admins and the owning teacher grade.
- Admins, the owning teacher and the submitting student may delete.
State transitions (see ``learning.lifecycle``):
    UNSUBMITTED -> SUBMITTED -> GRADED, GRADED -> SUBMITTED on resubmission
    (grade and feedback cleared).
Enrollment is not checked on submit; only coursework existence and the actor's
right to act for ``student_id`` are.
"""

import logging
from typing import Any

from django.core.exceptions import ValidationError

from ClassroomApp.core import policy
from ClassroomApp.core.errors import Result, collaborator_boundary, invalid, not_found
from ClassroomApp.core.policy import Action, OwnershipFacts
from ClassroomApp.core.validators import first_message, validate_grade
from ClassroomApp.domain.repositories import Store, get_store
from ClassroomApp.learning import lifecycle
from ClassroomApp.learning.lifecycle import SubmissionEvent

logger = logging.getLogger(__name__)

NON_STUDENT_TARGET = "Submissions can only be made for users with student role"


def _course_of(store: Store, coursework: Any) -> Any | None:
    return store.get_course(coursework.course_id)


def _in_scope(record: Any, parent_id: Any, attr: str) -> bool:
    return parent_id is None or getattr(record, attr) == parent_id


def _submission_context(
    store: Store,
    submission_id: Any,
    coursework_id: Any = None,
    course_id: Any = None,
) -> tuple[Any, Any] | None:
    """Return ``(submission, course)`` or None if either is missing.

    A submission addressed through a coursework or course it does not belong to
    counts as missing.
    """
    submission = store.get_submission(submission_id)
    if submission is None or not _in_scope(submission, coursework_id, "coursework_id"):
        return None
    coursework = store.get_coursework(submission.coursework_id)
    if coursework is None or not _in_scope(coursework, course_id, "course_id"):
        return None
    course = _course_of(store, coursework)
    if course is None:
        return None
    return submission, course


@collaborator_boundary
def submit(
    actor: Any,
    coursework_id: Any,
    student_id: Any,
    content: str,
    file_url: str | None = None,
    *,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """Create or overwrite the submission for (coursework, student).

    Returns:
        Result holding the stored submission. A resubmission keeps the same row,
        replaces ``content``/``file_url`` and resets ``grade``/``feedback``.
    """
    store = store or get_store()
    coursework = store.get_coursework(coursework_id)
    if coursework is None or not _in_scope(coursework, course_id, "course_id"):
        return not_found("Coursework")
    course = _course_of(store, coursework)
    if course is None:
        return not_found("Course")

    facts = OwnershipFacts(course_teacher_id=course.teacher_id, owner_id=student_id)
    denied = policy.authorize(actor, Action.SUBMIT, facts)
    if denied:
        return Result.from_error(denied)
    if student_id != actor.id:
        denied = policy.authorize(actor, Action.SUBMIT_ON_BEHALF, facts)
        if denied:
            return Result.from_error(denied)
        target = store.get_user(student_id)
        if target is None:
            return not_found("User")
        if not policy.is_student(target):
            return invalid(NON_STUDENT_TARGET)

    previous = lifecycle.state_of(store.find_submission(coursework_id, student_id))
    lifecycle.transition(previous, SubmissionEvent.SUBMIT)
    submission, created = store.save_submission(
        coursework_id, student_id, lifecycle.submission_fields(content, file_url)
    )
    if lifecycle.clears_grading(previous, SubmissionEvent.SUBMIT):
        logger.info("Resubmission %s cleared previous grade (coursework %s, student %s)",
                    submission.id, coursework_id, student_id)
    elif not created:
        logger.info("Submission %s overwritten by resubmission", submission.id)
    return Result.success(submission)


@collaborator_boundary
def grade(
    actor: Any,
    submission_id: Any,
    grade: Any,
    feedback: str | None = None,
    *,
    coursework_id: Any = None,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """Record a 0–100 grade (and optional feedback) on a submission."""
    store = store or get_store()
    context = _submission_context(store, submission_id, coursework_id, course_id)
    if context is None:
        return not_found("Submission")
    submission, course = context

    denied = policy.authorize(actor, Action.GRADE_SUBMISSION, OwnershipFacts(course_teacher_id=course.teacher_id))
    if denied:
        return Result.from_error(denied)
    try:
        validate_grade(grade)
    except ValidationError as exc:
        return invalid(first_message(exc))

    lifecycle.transition(lifecycle.state_of(submission), SubmissionEvent.GRADE)
    updated = store.update_submission(submission.id, **lifecycle.grading_fields(grade, feedback))
    logger.info("Submission %s graded %s by user %s", submission.id, grade, actor.id)
    return Result.success(updated)


@collaborator_boundary
def delete(
    actor: Any,
    submission_id: Any,
    *,
    coursework_id: Any = None,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """Withdraw a submission, returning the pair to UNSUBMITTED."""
    store = store or get_store()
    context = _submission_context(store, submission_id, coursework_id, course_id)
    if context is None:
        return not_found("Submission")
    submission, course = context

    facts = OwnershipFacts(course_teacher_id=course.teacher_id, owner_id=submission.student_id)
    denied = policy.authorize(actor, Action.DELETE_SUBMISSION, facts)
    if denied:
        return Result.from_error(denied)

    lifecycle.transition(lifecycle.state_of(submission), SubmissionEvent.WITHDRAW)
    store.delete_submission(submission.id)
    logger.info("Submission %s deleted by user %s", submission.id, actor.id)
    return Result.success(None)


@collaborator_boundary
def get(
    actor: Any,
    submission_id: Any,
    *,
    coursework_id: Any = None,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    store = store or get_store()
    context = _submission_context(store, submission_id, coursework_id, course_id)
    if context is None:
        return not_found("Submission")
    submission, course = context
    facts = OwnershipFacts(course_teacher_id=course.teacher_id, owner_id=submission.student_id)
    denied = policy.authorize(actor, Action.VIEW_SUBMISSION, facts)
    if denied:
        return Result.from_error(denied)
    return Result.success(submission)


@collaborator_boundary
def list_for_coursework(
    actor: Any,
    coursework_id: Any,
    *,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """All submissions for Admins and the owning teacher; students see only their own."""
    store = store or get_store()
    coursework = store.get_coursework(coursework_id)
    if coursework is None or not _in_scope(coursework, course_id, "course_id"):
        return not_found("Coursework")
    course = _course_of(store, coursework)
    if course is None:
        return not_found("Course")
    if policy.is_allowed(actor, Action.GRADE_SUBMISSION, OwnershipFacts(course_teacher_id=course.teacher_id)):
        return Result.success(store.list_submissions(coursework_id=coursework_id))
    return Result.success(store.list_submissions(coursework_id=coursework_id, student_id=actor.id))


@collaborator_boundary
def list_for_student(actor: Any, student_id: Any, *, store: Store | None = None) -> Result:
    store = store or get_store()
    denied = policy.authorize(actor, Action.VIEW_STUDENT_RECORDS, OwnershipFacts(owner_id=student_id))
    if denied:
        return Result.from_error(denied)
    return Result.success(store.list_submissions(student_id=student_id))
