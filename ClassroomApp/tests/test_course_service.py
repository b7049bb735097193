from datetime import datetime, timezone

from ClassroomApp.core.errors import ErrorCode
from ClassroomApp.domain.services import course_service


def test_teacher_creates_own_course(store, teacher):
    result = course_service.create_course(teacher, "Geometry", store=store)
    assert result.ok
    assert result.value.teacher_id == teacher.id


def test_student_cannot_create_course(store, student):
    assert course_service.create_course(student, "Nope", store=store).code is ErrorCode.PERMISSION_DENIED


def test_teacher_cannot_assign_course_to_someone_else(store, teacher, other_teacher):
    result = course_service.create_course(teacher, "Handoff", teacher_id=other_teacher.id, store=store)
    assert result.code is ErrorCode.PERMISSION_DENIED


def test_admin_assigns_course_to_teacher(store, admin, teacher, student):
    assert course_service.create_course(admin, "Physics", teacher_id=teacher.id, store=store).value.teacher_id == teacher.id
    result = course_service.create_course(admin, "Bad", teacher_id=student.id, store=store)
    assert result.code is ErrorCode.VALIDATION_ERROR
    assert result.error.detail == course_service.NOT_A_TEACHER


def test_update_course_ownership_rules(store, admin, teacher, other_teacher, course):
    assert course_service.update_course(other_teacher, course.id, {"title": "X"}, store=store).code is ErrorCode.PERMISSION_DENIED
    assert course_service.update_course(teacher, course.id, {"title": "Algebra II"}, store=store).value.title == "Algebra II"
    assert course_service.update_course(
        teacher, course.id, {"teacher_id": other_teacher.id}, store=store
    ).code is ErrorCode.PERMISSION_DENIED
    moved = course_service.update_course(admin, course.id, {"teacher_id": other_teacher.id}, store=store)
    assert moved.value.teacher_id == other_teacher.id


def test_delete_course_cascades(store, teacher, student, course, coursework):
    store.create_enrollment(course.id, student.id)
    store.save_submission(coursework.id, student.id, {"content": "x"})

    assert course_service.delete_course(teacher, course.id, store=store).ok
    assert store.get_course(course.id) is None
    assert store.list_enrollments(course_id=course.id) == []
    assert store.list_submissions(coursework_id=coursework.id) == []


def test_list_courses_by_role(store, admin, teacher, other_teacher, student, course):
    store.add_course(other_teacher.id, title="Biology")
    store.create_enrollment(course.id, student.id)

    assert len(course_service.list_courses(admin, store=store).value) == 2
    assert [c.id for c in course_service.list_courses(teacher, store=store).value] == [course.id]
    assert [c.id for c in course_service.list_courses(student, store=store).value] == [course.id]


def test_course_details_are_scoped(store, teacher, student, other_student, course, coursework):
    store.create_enrollment(course.id, student.id)

    managed = course_service.get_course_details(teacher, course.id, store=store).value
    assert [c.id for c in managed.coursework] == [coursework.id]
    assert len(managed.enrollments) == 1
    assert [u.id for u in managed.available_students] == [other_student.id]

    member = course_service.get_course_details(student, course.id, store=store).value
    assert member.is_enrolled
    assert member.enrollments == []
    assert member.available_students == []

    stranger = course_service.get_course_details(other_student, course.id, store=store)
    assert stranger.code is ErrorCode.PERMISSION_DENIED


def test_coursework_crud(store, teacher, other_teacher, course):
    created = course_service.add_coursework(teacher, course.id, "Essay", store=store).value
    assert course_service.add_coursework(other_teacher, course.id, "X", store=store).code is ErrorCode.PERMISSION_DENIED

    updated = course_service.update_coursework(teacher, created.id, {"title": "Long essay"}, store=store)
    assert updated.value.title == "Long essay"

    assert course_service.delete_coursework(other_teacher, created.id, store=store).code is ErrorCode.PERMISSION_DENIED
    assert course_service.delete_coursework(teacher, created.id, store=store).ok
    assert course_service.update_coursework(teacher, created.id, {}, store=store).code is ErrorCode.NOT_FOUND


def test_list_coursework_for_members(store, teacher, student, other_student, course, coursework):
    store.create_enrollment(course.id, student.id)
    assert len(course_service.list_coursework(student, course.id, store=store).value) == 1
    assert course_service.list_coursework(other_student, course.id, store=store).code is ErrorCode.PERMISSION_DENIED


def test_get_coursework_for_members(store, teacher, student, other_student, course, coursework):
    store.create_enrollment(course.id, student.id)
    other_course = store.add_course(teacher.id, title="Geometry")

    assert course_service.get_coursework(student, coursework.id, course_id=course.id, store=store).value.title == "Homework 1"
    assert course_service.get_coursework(other_student, coursework.id, store=store).code is ErrorCode.PERMISSION_DENIED
    assert course_service.get_coursework(teacher, coursework.id, course_id=other_course.id, store=store).code is ErrorCode.NOT_FOUND
    assert course_service.delete_coursework(teacher, coursework.id, course_id=other_course.id, store=store).code is ErrorCode.NOT_FOUND
    assert store.get_coursework(coursework.id) is not None


def test_coursework_ordered_by_due_date(store, teacher, course):
    undated = store.add_coursework(course.id, title="Reading")
    late = store.add_coursework(course.id, title="Final", due_date=datetime(2025, 6, 1, tzinfo=timezone.utc))
    early = store.add_coursework(course.id, title="Quiz", due_date=datetime(2025, 3, 1, tzinfo=timezone.utc))

    listed = course_service.list_coursework(teacher, course.id, store=store).value
    assert [c.id for c in listed] == [early.id, late.id, undated.id]


def test_dashboard_stats(store, admin, teacher, student, other_student, course):
    store.create_enrollment(course.id, student.id)
    store.create_enrollment(course.id, other_student.id)

    everything = course_service.dashboard_stats(admin, store=store).value
    assert (everything.course_count, everything.student_count, everything.teacher_count) == (1, 2, 1)
    assert everything.enrollment_count == 2

    mine = course_service.dashboard_stats(teacher, store=store).value
    assert (mine.course_count, mine.enrollment_count) == (1, 2)

    assert course_service.dashboard_stats(student, store=store).value.enrollment_count == 1
