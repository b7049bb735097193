"""Domain service functions for enrollment management.

Only Admins and the course's owning teacher enroll or unenroll students. A
(course, student) pair is enrolled at most once: a repeated ``enroll`` is a
conflict, not a silent success.
"""

import logging
from typing import Any

from ClassroomApp.core import policy
from ClassroomApp.core.errors import DuplicateRecord, Result, collaborator_boundary, conflict, not_found
from ClassroomApp.core.policy import Action, OwnershipFacts
from ClassroomApp.domain.repositories import Store, get_store

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "Student is already enrolled in this course"


def _manage(store: Store, actor: Any, course_id: Any) -> tuple[Any, Result | None]:
    """Load the course and check MANAGE_ENROLLMENT; return ``(course, failure)``."""
    course = store.get_course(course_id)
    if course is None:
        return None, not_found("Course")
    denied = policy.authorize(actor, Action.MANAGE_ENROLLMENT, OwnershipFacts(course_teacher_id=course.teacher_id))
    if denied:
        return course, Result.from_error(denied)
    return course, None


@collaborator_boundary
def enroll(actor: Any, course_id: Any, student_id: Any, *, store: Store | None = None) -> Result:
    """Enroll ``student_id`` in the course.

    Returns:
        Result with the new Enrollment, or CONFLICT if the pair already exists.
    """
    store = store or get_store()
    course, failure = _manage(store, actor, course_id)
    if failure:
        return failure
    if store.get_user(student_id) is None:
        return not_found("Student")
    if store.find_enrollment(course.id, student_id) is not None:
        logger.info("Duplicate enrollment rejected (course %s, student %s)", course.id, student_id)
        return conflict(ALREADY_ENROLLED)
    try:
        enrollment = store.create_enrollment(course.id, student_id)
    except DuplicateRecord:
        logger.info("Concurrent enrollment rejected (course %s, student %s)", course.id, student_id)
        return conflict(ALREADY_ENROLLED)
    logger.info("Student %s enrolled in course %s by user %s", student_id, course.id, actor.id)
    return Result.success(enrollment)


@collaborator_boundary
def unenroll(
    actor: Any,
    enrollment_id: Any,
    *,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """Remove an enrollment; the owning course is resolved through the enrollment."""
    store = store or get_store()
    enrollment = store.get_enrollment(enrollment_id)
    if enrollment is None or (course_id is not None and enrollment.course_id != course_id):
        return not_found("Enrollment")
    _, failure = _manage(store, actor, enrollment.course_id)
    if failure:
        return failure
    store.delete_enrollment(enrollment.id)
    logger.info("Enrollment %s removed by user %s", enrollment.id, actor.id)
    return Result.success(None)


@collaborator_boundary
def list_enrollments(actor: Any, course_id: Any, *, store: Store | None = None) -> Result:
    store = store or get_store()
    course, failure = _manage(store, actor, course_id)
    if failure:
        return failure
    return Result.success(store.list_enrollments(course_id=course.id))


@collaborator_boundary
def list_available_students(actor: Any, course_id: Any, *, store: Store | None = None) -> Result:
    """Students not yet enrolled in the course, by name."""
    store = store or get_store()
    course, failure = _manage(store, actor, course_id)
    if failure:
        return failure
    return Result.success(store.list_available_students(course.id))


@collaborator_boundary
def enrolled_courses(actor: Any, student_id: Any, *, store: Store | None = None) -> Result:
    """Enrollments (with courses) of a student; visible to Admins and the student."""
    store = store or get_store()
    denied = policy.authorize(actor, Action.VIEW_STUDENT_RECORDS, OwnershipFacts(owner_id=student_id))
    if denied:
        return Result.from_error(denied)
    return Result.success(store.list_enrollments(student_id=student_id))
