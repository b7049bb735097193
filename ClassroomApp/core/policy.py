"""Authorization policy: one declarative rule table consumed by every service.

Rules are pure predicates over the actor (anything with ``id`` and ``role``) and the
ownership facts the caller fetched beforehand. Nothing here touches the database;
every role comparison in the project goes through this module.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable

from ClassroomApp.core.choices import UserRole
from ClassroomApp.core.errors import ErrorCode, ServiceError


class Action(enum.Enum):
    VIEW_COURSE = "view_course"
    CREATE_COURSE = "create_course"
    MANAGE_COURSE = "manage_course"
    REASSIGN_COURSE = "reassign_course"
    MANAGE_COURSEWORK = "manage_coursework"
    MANAGE_ENROLLMENT = "manage_enrollment"
    MANAGE_RESOURCES = "manage_resources"
    SUBMIT = "submit"
    SUBMIT_ON_BEHALF = "submit_on_behalf"
    GRADE_SUBMISSION = "grade_submission"
    DELETE_SUBMISSION = "delete_submission"
    VIEW_SUBMISSION = "view_submission"
    VIEW_STUDENT_RECORDS = "view_student_records"
    CHANGE_ROLE = "change_role"
    MANAGE_USERS = "manage_users"
    UPDATE_PROFILE = "update_profile"


@dataclass(frozen=True)
class Actor:
    """Authenticated principal as seen by the services."""
    id: Any
    role: str

    @classmethod
    def of(cls, user: Any) -> "Actor":
        return cls(id=user.id, role=user.role)


@dataclass(frozen=True)
class OwnershipFacts:
    """Facts about the target resource, fetched by the caller.

    course_teacher_id: ``teacherId`` of the course the resource belongs to.
    enrolled: whether the actor holds an enrollment in that course.
    owner_id: the student owning the submission/enrollment, or the target of a
        submission, or the user whose records/profile are addressed.
    """
    course_teacher_id: Any = None
    enrolled: bool = False
    owner_id: Any = None


NO_FACTS = OwnershipFacts()

Rule = Callable[[Any, OwnershipFacts], bool]


def is_admin(actor: Any, facts: OwnershipFacts = NO_FACTS) -> bool:
    return actor.role == UserRole.ADMIN


def is_teacher(actor: Any, facts: OwnershipFacts = NO_FACTS) -> bool:
    return actor.role == UserRole.TEACHER


def is_student(actor: Any, facts: OwnershipFacts = NO_FACTS) -> bool:
    return actor.role == UserRole.STUDENT


def owns_course(actor: Any, facts: OwnershipFacts) -> bool:
    return is_teacher(actor) and facts.course_teacher_id is not None and facts.course_teacher_id == actor.id


def enrolled_student(actor: Any, facts: OwnershipFacts) -> bool:
    return is_student(actor) and facts.enrolled


def is_owner(actor: Any, facts: OwnershipFacts) -> bool:
    return facts.owner_id is not None and facts.owner_id == actor.id


RULES: dict[Action, tuple[Rule, ...]] = {
    Action.VIEW_COURSE: (is_admin, owns_course, enrolled_student),
    Action.CREATE_COURSE: (is_admin, is_teacher),
    Action.MANAGE_COURSE: (is_admin, owns_course),
    Action.REASSIGN_COURSE: (is_admin,),
    Action.MANAGE_COURSEWORK: (is_admin, owns_course),
    Action.MANAGE_ENROLLMENT: (is_admin, owns_course),
    Action.MANAGE_RESOURCES: (is_admin, owns_course),
    Action.SUBMIT: (is_admin, owns_course, is_owner),
    Action.SUBMIT_ON_BEHALF: (is_admin, owns_course),
    Action.GRADE_SUBMISSION: (is_admin, owns_course),
    Action.DELETE_SUBMISSION: (is_admin, owns_course, is_owner),
    Action.VIEW_SUBMISSION: (is_admin, owns_course, is_owner),
    Action.VIEW_STUDENT_RECORDS: (is_admin, is_owner),
    Action.CHANGE_ROLE: (is_admin,),
    Action.MANAGE_USERS: (is_admin,),
    Action.UPDATE_PROFILE: (is_admin, is_owner),
}

DENIAL_MESSAGES: dict[Action, str] = {
    Action.VIEW_COURSE: "You don't have access to this course",
    Action.CREATE_COURSE: "Only teachers and administrators can create courses",
    Action.MANAGE_COURSE: "You don't have permission to modify this course",
    Action.REASSIGN_COURSE: "Only administrators can change the course teacher",
    Action.MANAGE_COURSEWORK: "You don't have permission to manage coursework for this course",
    Action.MANAGE_ENROLLMENT: "You don't have permission to manage enrollments for this course",
    Action.MANAGE_RESOURCES: "You don't have permission to manage resources for this course",
    Action.SUBMIT: "You can only submit for yourself",
    Action.SUBMIT_ON_BEHALF: "You don't have permission to submit on behalf of other users",
    Action.GRADE_SUBMISSION: "You don't have permission to grade this submission",
    Action.DELETE_SUBMISSION: "You don't have permission to delete this submission",
    Action.VIEW_SUBMISSION: "You don't have permission to view this submission",
    Action.VIEW_STUDENT_RECORDS: "You can only view your own records",
    Action.CHANGE_ROLE: "Only administrators can change user roles",
    Action.MANAGE_USERS: "Only administrators can manage users",
    Action.UPDATE_PROFILE: "You don't have permission to update this user",
}


def is_allowed(actor: Any, action: Action, facts: OwnershipFacts = NO_FACTS) -> bool:
    """Return True if any rule registered for ``action`` admits ``actor``."""
    if actor is None or actor.role not in UserRole.values:
        return False
    return any(rule(actor, facts) for rule in RULES[action])


def authorize(actor: Any, action: Action, facts: OwnershipFacts = NO_FACTS) -> ServiceError | None:
    """Return a PERMISSION_DENIED error when ``actor`` may not perform ``action``."""
    if is_allowed(actor, action, facts):
        return None
    return ServiceError(ErrorCode.PERMISSION_DENIED, DENIAL_MESSAGES[action])


def can_own_courses(user: Any) -> bool:
    """Course ``teacherId`` may only point at teachers or administrators."""
    return is_teacher(user) or is_admin(user)
