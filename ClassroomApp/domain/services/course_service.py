"""Domain service functions for course lifecycle, coursework and dashboards.

These helpers encapsulate business rules (e.g., only the owning teacher or an Admin
modifies a course) and keep view/serializer layers thin.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ClassroomApp.core import policy
from ClassroomApp.core.choices import UserRole
from ClassroomApp.core.errors import Result, collaborator_boundary, invalid, not_found
from ClassroomApp.core.policy import Action, OwnershipFacts
from ClassroomApp.domain.repositories import Store, get_store

logger = logging.getLogger(__name__)

COURSE_FIELDS = ("title", "description", "image_url")
COURSEWORK_FIELDS = ("title", "description", "due_date")
NOT_A_TEACHER = "Courses can only be assigned to teachers or administrators"


@dataclass
class CourseDetails:
    """Everything a course page needs, scoped to what the actor may see."""
    course: Any
    is_enrolled: bool = False
    enrollments: list[Any] = field(default_factory=list)
    coursework: list[Any] = field(default_factory=list)
    available_students: list[Any] = field(default_factory=list)


@dataclass
class DashboardStats:
    course_count: int = 0
    student_count: int = 0
    teacher_count: int = 0
    enrollment_count: int = 0


def _owned(store: Store, actor: Any, course_id: Any, action: Action) -> tuple[Any, Result | None]:
    course = store.get_course(course_id)
    if course is None:
        return None, not_found("Course")
    denied = policy.authorize(actor, action, OwnershipFacts(course_teacher_id=course.teacher_id))
    return course, (Result.from_error(denied) if denied else None)


def _can_view(store: Store, actor: Any, course_id: Any) -> Result | None:
    course = store.get_course(course_id)
    if course is None:
        return not_found("Course")
    facts = OwnershipFacts(
        course_teacher_id=course.teacher_id,
        enrolled=store.find_enrollment(course.id, actor.id) is not None,
    )
    denied = policy.authorize(actor, Action.VIEW_COURSE, facts)
    return Result.from_error(denied) if denied else None


def _check_teacher(store: Store, teacher_id: Any) -> Result | None:
    teacher = store.get_user(teacher_id)
    if teacher is None:
        return not_found("Teacher")
    if not policy.can_own_courses(teacher):
        return invalid(NOT_A_TEACHER)
    return None


@collaborator_boundary
def create_course(
    actor: Any,
    title: str,
    description: str | None = None,
    image_url: str | None = None,
    teacher_id: Any = None,
    *,
    store: Store | None = None,
) -> Result:
    """Create a course owned by ``teacher_id`` (defaults to the actor).

    Assigning a course to someone else requires the right to reassign courses.
    """
    store = store or get_store()
    denied = policy.authorize(actor, Action.CREATE_COURSE)
    if denied:
        return Result.from_error(denied)
    teacher_id = actor.id if teacher_id is None else teacher_id
    if teacher_id != actor.id:
        denied = policy.authorize(actor, Action.REASSIGN_COURSE)
        if denied:
            return Result.from_error(denied)
        failure = _check_teacher(store, teacher_id)
        if failure:
            return failure
    course = store.create_course(title=title, description=description, image_url=image_url, teacher_id=teacher_id)
    logger.info("Course %s created by user %s (teacher %s)", course.id, actor.id, teacher_id)
    return Result.success(course)


@collaborator_boundary
def update_course(actor: Any, course_id: Any, changes: dict[str, Any], *, store: Store | None = None) -> Result:
    """Update title/description/image; a ``teacher_id`` change needs reassign rights."""
    store = store or get_store()
    course, failure = _owned(store, actor, course_id, Action.MANAGE_COURSE)
    if failure:
        return failure
    fields = {name: changes[name] for name in COURSE_FIELDS if name in changes}
    teacher_id = changes.get("teacher_id")
    if teacher_id is not None and teacher_id != course.teacher_id:
        denied = policy.authorize(actor, Action.REASSIGN_COURSE)
        if denied:
            return Result.from_error(denied)
        failure = _check_teacher(store, teacher_id)
        if failure:
            return failure
        fields["teacher_id"] = teacher_id
    if not fields:
        return Result.success(course)
    return Result.success(store.update_course(course.id, **fields))


@collaborator_boundary
def delete_course(actor: Any, course_id: Any, *, store: Store | None = None) -> Result:
    """Delete a course together with its coursework, enrollments and resources."""
    store = store or get_store()
    course, failure = _owned(store, actor, course_id, Action.MANAGE_COURSE)
    if failure:
        return failure
    store.delete_course(course.id)
    logger.info("Course %s deleted by user %s", course.id, actor.id)
    return Result.success(None)


@collaborator_boundary
def list_courses(actor: Any, *, store: Store | None = None) -> Result:
    """Admins see every course, teachers their own, students those they are enrolled in."""
    store = store or get_store()
    if policy.is_admin(actor):
        return Result.success(store.list_courses())
    if policy.is_teacher(actor):
        return Result.success(store.list_courses(teacher_id=actor.id))
    return Result.success(store.list_courses(student_id=actor.id))


@collaborator_boundary
def get_course_details(actor: Any, course_id: Any, *, store: Store | None = None) -> Result:
    store = store or get_store()
    course = store.get_course(course_id)
    if course is None:
        return not_found("Course")
    is_enrolled = store.find_enrollment(course.id, actor.id) is not None
    facts = OwnershipFacts(course_teacher_id=course.teacher_id, enrolled=is_enrolled)
    denied = policy.authorize(actor, Action.VIEW_COURSE, facts)
    if denied:
        return Result.from_error(denied)

    details = CourseDetails(course=course, is_enrolled=is_enrolled, coursework=store.list_coursework(course.id))
    if policy.is_allowed(actor, Action.MANAGE_ENROLLMENT, facts):
        details.enrollments = store.list_enrollments(course_id=course.id)
        details.available_students = store.list_available_students(course.id)
    return Result.success(details)


@collaborator_boundary
def add_coursework(
    actor: Any,
    course_id: Any,
    title: str,
    description: str | None = None,
    due_date: Any = None,
    *,
    store: Store | None = None,
) -> Result:
    store = store or get_store()
    course, failure = _owned(store, actor, course_id, Action.MANAGE_COURSEWORK)
    if failure:
        return failure
    coursework = store.create_coursework(course_id=course.id, title=title, description=description, due_date=due_date)
    logger.info("Coursework %s added to course %s", coursework.id, course.id)
    return Result.success(coursework)


def _coursework_context(
    store: Store,
    actor: Any,
    coursework_id: Any,
    course_id: Any = None,
    action: Action = Action.MANAGE_COURSEWORK,
) -> tuple[Any, Result | None]:
    coursework = store.get_coursework(coursework_id)
    if coursework is None or (course_id is not None and coursework.course_id != course_id):
        return None, not_found("Coursework")
    if action is Action.VIEW_COURSE:
        return coursework, _can_view(store, actor, coursework.course_id)
    _, failure = _owned(store, actor, coursework.course_id, action)
    return coursework, failure


@collaborator_boundary
def update_coursework(
    actor: Any,
    coursework_id: Any,
    changes: dict[str, Any],
    *,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    store = store or get_store()
    coursework, failure = _coursework_context(store, actor, coursework_id, course_id)
    if failure:
        return failure
    fields = {name: changes[name] for name in COURSEWORK_FIELDS if name in changes}
    if not fields:
        return Result.success(coursework)
    return Result.success(store.update_coursework(coursework.id, **fields))


@collaborator_boundary
def delete_coursework(
    actor: Any,
    coursework_id: Any,
    *,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """Delete coursework and, with it, every submission made for it."""
    store = store or get_store()
    coursework, failure = _coursework_context(store, actor, coursework_id, course_id)
    if failure:
        return failure
    store.delete_coursework(coursework.id)
    logger.info("Coursework %s deleted by user %s", coursework.id, actor.id)
    return Result.success(None)


@collaborator_boundary
def dashboard_stats(actor: Any, *, store: Store | None = None) -> Result:
    store = store or get_store()
    if policy.is_admin(actor):
        return Result.success(DashboardStats(
            course_count=store.count_courses(),
            student_count=store.count_users(UserRole.STUDENT),
            teacher_count=store.count_users(UserRole.TEACHER),
            enrollment_count=store.count_enrollments(),
        ))
    if policy.is_teacher(actor):
        return Result.success(DashboardStats(
            course_count=store.count_courses(teacher_id=actor.id),
            enrollment_count=store.count_enrollments(teacher_id=actor.id),
        ))
    return Result.success(DashboardStats(enrollment_count=store.count_enrollments(student_id=actor.id)))


@collaborator_boundary
def list_coursework(actor: Any, course_id: Any, *, store: Store | None = None) -> Result:
    store = store or get_store()
    failure = _can_view(store, actor, course_id)
    if failure:
        return failure
    return Result.success(store.list_coursework(course_id))


@collaborator_boundary
def get_coursework(
    actor: Any,
    coursework_id: Any,
    *,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """A single coursework item, visible to anyone who may view its course."""
    store = store or get_store()
    coursework, failure = _coursework_context(store, actor, coursework_id, course_id, Action.VIEW_COURSE)
    if failure:
        return failure
    return Result.success(coursework)
