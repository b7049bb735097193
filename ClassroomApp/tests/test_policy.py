import pytest

from ClassroomApp.core import policy
from ClassroomApp.core.choices import UserRole
from ClassroomApp.core.errors import ErrorCode
from ClassroomApp.core.policy import Action, Actor, OwnershipFacts

ADMIN = Actor(1, UserRole.ADMIN)
TEACHER = Actor(2, UserRole.TEACHER)
OTHER_TEACHER = Actor(3, UserRole.TEACHER)
STUDENT = Actor(4, UserRole.STUDENT)
OTHER_STUDENT = Actor(5, UserRole.STUDENT)

OWN_COURSE = OwnershipFacts(course_teacher_id=TEACHER.id)


@pytest.mark.parametrize("actor,allowed", [
    (ADMIN, True),
    (TEACHER, True),
    (OTHER_TEACHER, False),
    (STUDENT, False),
])
def test_grade_only_admin_or_owning_teacher(actor, allowed):
    assert policy.is_allowed(actor, Action.GRADE_SUBMISSION, OWN_COURSE) is allowed


@pytest.mark.parametrize("action", [
    Action.MANAGE_COURSE,
    Action.MANAGE_COURSEWORK,
    Action.MANAGE_ENROLLMENT,
    Action.MANAGE_RESOURCES,
])
def test_course_management_matrix(action):
    assert policy.is_allowed(ADMIN, action, OWN_COURSE)
    assert policy.is_allowed(TEACHER, action, OWN_COURSE)
    assert not policy.is_allowed(OTHER_TEACHER, action, OWN_COURSE)
    assert not policy.is_allowed(STUDENT, action, OWN_COURSE)


def test_teacher_of_unowned_course_is_not_owner():
    assert not policy.is_allowed(TEACHER, Action.MANAGE_COURSE, OwnershipFacts())


def test_submit_for_self_only():
    facts = OwnershipFacts(course_teacher_id=TEACHER.id, owner_id=STUDENT.id)
    assert policy.is_allowed(STUDENT, Action.SUBMIT, facts)
    assert not policy.is_allowed(OTHER_STUDENT, Action.SUBMIT, facts)
    assert not policy.is_allowed(OTHER_TEACHER, Action.SUBMIT, facts)


def test_submit_on_behalf_needs_admin_or_owner():
    assert policy.is_allowed(ADMIN, Action.SUBMIT_ON_BEHALF, OWN_COURSE)
    assert policy.is_allowed(TEACHER, Action.SUBMIT_ON_BEHALF, OWN_COURSE)
    assert not policy.is_allowed(OTHER_TEACHER, Action.SUBMIT_ON_BEHALF, OWN_COURSE)
    assert not policy.is_allowed(STUDENT, Action.SUBMIT_ON_BEHALF, OWN_COURSE)


def test_delete_submission_includes_submitter():
    facts = OwnershipFacts(course_teacher_id=TEACHER.id, owner_id=STUDENT.id)
    assert policy.is_allowed(STUDENT, Action.DELETE_SUBMISSION, facts)
    assert not policy.is_allowed(OTHER_STUDENT, Action.DELETE_SUBMISSION, facts)


def test_view_course_requires_enrollment_for_students():
    assert policy.is_allowed(STUDENT, Action.VIEW_COURSE, OwnershipFacts(course_teacher_id=2, enrolled=True))
    assert not policy.is_allowed(STUDENT, Action.VIEW_COURSE, OwnershipFacts(course_teacher_id=2))


@pytest.mark.parametrize("action", [Action.CHANGE_ROLE, Action.MANAGE_USERS, Action.REASSIGN_COURSE])
def test_admin_only_actions(action):
    assert policy.is_allowed(ADMIN, action)
    assert not policy.is_allowed(TEACHER, action)
    assert not policy.is_allowed(STUDENT, action)


def test_missing_or_unknown_actor_is_denied():
    assert not policy.is_allowed(None, Action.VIEW_COURSE, OWN_COURSE)
    assert not policy.is_allowed(Actor(9, "GUEST"), Action.SUBMIT, OwnershipFacts(owner_id=9))


def test_authorize_returns_permission_denied():
    error = policy.authorize(STUDENT, Action.GRADE_SUBMISSION, OWN_COURSE)
    assert error.code is ErrorCode.PERMISSION_DENIED
    assert error.detail == policy.DENIAL_MESSAGES[Action.GRADE_SUBMISSION]
    assert policy.authorize(ADMIN, Action.GRADE_SUBMISSION, OWN_COURSE) is None


def test_every_action_has_rules_and_message():
    assert set(policy.RULES) == set(Action)
    assert set(policy.DENIAL_MESSAGES) == set(Action)


def test_can_own_courses():
    assert policy.can_own_courses(TEACHER)
    assert policy.can_own_courses(ADMIN)
    assert not policy.can_own_courses(STUDENT)
