"""Persistence collaborator: the store interface services depend on, and its ORM backend.

Services never import models directly; they receive a ``Store`` (injected, or the one
named by ``settings.CLASSROOM["STORE"]``). Every mutating method is a single write;
``atomic`` groups several of them into one transaction.
``save_submission`` is an atomic find-or-create/update keyed on the
(coursework, student) uniqueness constraint.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from typing import Any, ContextManager, Iterator

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils.module_loading import import_string

from ClassroomApp.core.choices import UserRole
from ClassroomApp.core.errors import CollaboratorError, DuplicateRecord


class Store(ABC):
    """CRUD operations keyed by entity, returning objects shaped like the models."""

    def atomic(self) -> ContextManager[None]:
        """Group several writes so they commit or fail together."""
        return nullcontext()

    # ---------- Users ----------
    @abstractmethod
    def get_user(self, user_id: Any) -> Any | None: ...

    @abstractmethod
    def get_user_by_external_id(self, external_id: str) -> Any | None: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Any | None: ...

    @abstractmethod
    def create_user(self, *, email: str, full_name: str, role: str,
                    external_id: str | None = None, avatar_url: str | None = None) -> Any: ...

    @abstractmethod
    def update_user(self, user_id: Any, **fields: Any) -> Any: ...

    @abstractmethod
    def delete_user(self, user_id: Any) -> None: ...

    @abstractmethod
    def list_users(self, role: str | None = None) -> list[Any]: ...

    @abstractmethod
    def find_admin(self, exclude_id: Any = None) -> Any | None: ...

    @abstractmethod
    def count_users(self, role: str | None = None) -> int: ...

    # ---------- Courses ----------
    @abstractmethod
    def get_course(self, course_id: Any) -> Any | None: ...

    @abstractmethod
    def list_courses(self, *, teacher_id: Any = None, student_id: Any = None) -> list[Any]: ...

    @abstractmethod
    def create_course(self, **fields: Any) -> Any: ...

    @abstractmethod
    def update_course(self, course_id: Any, **fields: Any) -> Any: ...

    @abstractmethod
    def delete_course(self, course_id: Any) -> None: ...

    @abstractmethod
    def reassign_courses(self, from_teacher_id: Any, to_teacher_id: Any) -> int: ...

    @abstractmethod
    def count_courses(self, teacher_id: Any = None) -> int: ...

    # ---------- Coursework ----------
    @abstractmethod
    def get_coursework(self, coursework_id: Any) -> Any | None: ...

    @abstractmethod
    def list_coursework(self, course_id: Any) -> list[Any]:
        """Coursework of a course by due date, undated items last."""

    @abstractmethod
    def create_coursework(self, **fields: Any) -> Any: ...

    @abstractmethod
    def update_coursework(self, coursework_id: Any, **fields: Any) -> Any: ...

    @abstractmethod
    def delete_coursework(self, coursework_id: Any) -> None: ...

    # ---------- Enrollments ----------
    @abstractmethod
    def get_enrollment(self, enrollment_id: Any) -> Any | None: ...

    @abstractmethod
    def find_enrollment(self, course_id: Any, student_id: Any) -> Any | None: ...

    @abstractmethod
    def list_enrollments(self, *, course_id: Any = None, student_id: Any = None) -> list[Any]: ...

    @abstractmethod
    def create_enrollment(self, course_id: Any, student_id: Any) -> Any:
        """Create the pair; raise ``DuplicateRecord`` if it already exists."""

    @abstractmethod
    def delete_enrollment(self, enrollment_id: Any) -> None: ...

    @abstractmethod
    def list_available_students(self, course_id: Any) -> list[Any]: ...

    @abstractmethod
    def count_enrollments(self, *, course_id: Any = None, teacher_id: Any = None, student_id: Any = None) -> int: ...

    # ---------- Submissions ----------
    @abstractmethod
    def get_submission(self, submission_id: Any) -> Any | None: ...

    @abstractmethod
    def find_submission(self, coursework_id: Any, student_id: Any) -> Any | None: ...

    @abstractmethod
    def list_submissions(self, *, coursework_id: Any = None, student_id: Any = None) -> list[Any]: ...

    @abstractmethod
    def save_submission(self, coursework_id: Any, student_id: Any, fields: dict[str, Any]) -> tuple[Any, bool]:
        """Atomically create or overwrite the pair's submission; return ``(submission, created)``."""

    @abstractmethod
    def update_submission(self, submission_id: Any, **fields: Any) -> Any: ...

    @abstractmethod
    def delete_submission(self, submission_id: Any) -> None: ...

    # ---------- Resources ----------
    @abstractmethod
    def get_resource(self, resource_id: Any) -> Any | None: ...

    @abstractmethod
    def list_resources(self, course_id: Any) -> list[Any]: ...

    @abstractmethod
    def create_resource(self, **fields: Any) -> Any: ...

    @abstractmethod
    def delete_resource(self, resource_id: Any) -> None: ...


@contextmanager
def _db_errors(operation: str) -> Iterator[None]:
    """Translate ORM failures into collaborator errors."""
    try:
        yield
    except IntegrityError as exc:
        raise DuplicateRecord(operation, str(exc)) from exc
    except DatabaseError as exc:
        raise CollaboratorError(operation, str(exc)) from exc


class DjangoStore(Store):
    """Store backed by the Django ORM models."""

    def __init__(self) -> None:
        from ClassroomApp.courses.models import Course, Coursework, CourseResource, Enrollment
        from ClassroomApp.learning.models import Submission

        self.User = get_user_model()
        self.Course = Course
        self.Coursework = Coursework
        self.CourseResource = CourseResource
        self.Enrollment = Enrollment
        self.Submission = Submission

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with _db_errors("atomic"), transaction.atomic():
            yield

    def _update(self, model: Any, pk: Any, operation: str, fields: dict[str, Any]) -> Any:
        with _db_errors(operation), transaction.atomic():
            obj = model.objects.select_for_update().filter(pk=pk).first()
            if obj is None:
                raise CollaboratorError(operation, f"{model.__name__} {pk} disappeared before update")
            for name, value in fields.items():
                setattr(obj, name, value)
            obj.save()
        return obj

    def _delete(self, model: Any, pk: Any, operation: str) -> None:
        with _db_errors(operation), transaction.atomic():
            model.objects.filter(pk=pk).delete()

    # ---------- Users ----------
    def get_user(self, user_id):
        with _db_errors("get_user"):
            return self.User.objects.filter(pk=user_id).first()

    def get_user_by_external_id(self, external_id):
        with _db_errors("get_user_by_external_id"):
            return self.User.objects.filter(external_id=external_id).first()

    def get_user_by_email(self, email):
        with _db_errors("get_user_by_email"):
            return self.User.objects.filter(email__iexact=email).first()

    def create_user(self, *, email, full_name, role, external_id=None, avatar_url=None):
        with _db_errors("create_user"), transaction.atomic():
            return self.User.objects.create_user(
                username=external_id or email,
                email=email,
                full_name=full_name,
                role=role,
                external_id=external_id,
                avatar_url=avatar_url,
            )

    def update_user(self, user_id, **fields):
        return self._update(self.User, user_id, "update_user", fields)

    def delete_user(self, user_id):
        self._delete(self.User, user_id, "delete_user")

    def list_users(self, role=None):
        with _db_errors("list_users"):
            qs = self.User.objects.all()
            if role:
                qs = qs.filter(role=role)
            return list(qs.order_by("full_name", "id"))

    def find_admin(self, exclude_id=None):
        with _db_errors("find_admin"):
            return self.User.objects.filter(role=UserRole.ADMIN).exclude(pk=exclude_id).order_by("id").first()

    def count_users(self, role=None):
        with _db_errors("count_users"):
            qs = self.User.objects.all()
            return (qs.filter(role=role) if role else qs).count()

    # ---------- Courses ----------
    def get_course(self, course_id):
        with _db_errors("get_course"):
            return self.Course.objects.select_related("teacher").filter(pk=course_id).first()

    def list_courses(self, *, teacher_id=None, student_id=None):
        with _db_errors("list_courses"):
            qs = self.Course.objects.select_related("teacher")
            if teacher_id is not None:
                qs = qs.for_teacher(teacher_id)
            if student_id is not None:
                qs = qs.where_enrolled(student_id)
            return list(qs.order_by("title", "id"))

    def create_course(self, **fields):
        with _db_errors("create_course"), transaction.atomic():
            return self.Course.objects.create(**fields)

    def update_course(self, course_id, **fields):
        return self._update(self.Course, course_id, "update_course", fields)

    def delete_course(self, course_id):
        self._delete(self.Course, course_id, "delete_course")

    def reassign_courses(self, from_teacher_id, to_teacher_id):
        with _db_errors("reassign_courses"):
            return self.Course.objects.filter(teacher_id=from_teacher_id).update(teacher_id=to_teacher_id)

    def count_courses(self, teacher_id=None):
        with _db_errors("count_courses"):
            qs = self.Course.objects.all()
            return (qs.for_teacher(teacher_id) if teacher_id is not None else qs).count()

    # ---------- Coursework ----------
    def get_coursework(self, coursework_id):
        with _db_errors("get_coursework"):
            return self.Coursework.objects.filter(pk=coursework_id).first()

    def list_coursework(self, course_id):
        with _db_errors("list_coursework"):
            return list(self.Coursework.objects.filter(course_id=course_id).order_by(F("due_date").asc(nulls_last=True), "id"))

    def create_coursework(self, **fields):
        with _db_errors("create_coursework"), transaction.atomic():
            return self.Coursework.objects.create(**fields)

    def update_coursework(self, coursework_id, **fields):
        return self._update(self.Coursework, coursework_id, "update_coursework", fields)

    def delete_coursework(self, coursework_id):
        self._delete(self.Coursework, coursework_id, "delete_coursework")

    # ---------- Enrollments ----------
    def get_enrollment(self, enrollment_id):
        with _db_errors("get_enrollment"):
            return self.Enrollment.objects.filter(pk=enrollment_id).first()

    def find_enrollment(self, course_id, student_id):
        with _db_errors("find_enrollment"):
            return self.Enrollment.objects.filter(course_id=course_id, student_id=student_id).first()

    def list_enrollments(self, *, course_id=None, student_id=None):
        with _db_errors("list_enrollments"):
            if course_id is not None:
                return list(self.Enrollment.objects.for_course(course_id))
            return list(self.Enrollment.objects.for_student(student_id))

    def create_enrollment(self, course_id, student_id):
        with _db_errors("create_enrollment"), transaction.atomic():
            return self.Enrollment.objects.create(course_id=course_id, student_id=student_id)

    def delete_enrollment(self, enrollment_id):
        self._delete(self.Enrollment, enrollment_id, "delete_enrollment")

    def list_available_students(self, course_id):
        with _db_errors("list_available_students"):
            return list(
                self.User.objects.filter(role=UserRole.STUDENT)
                .exclude(enrollments__course_id=course_id)
                .order_by("full_name", "id")
            )

    def count_enrollments(self, *, course_id=None, teacher_id=None, student_id=None):
        with _db_errors("count_enrollments"):
            qs = self.Enrollment.objects.all()
            if course_id is not None:
                qs = qs.filter(course_id=course_id)
            if teacher_id is not None:
                qs = qs.taught_by(teacher_id)
            if student_id is not None:
                qs = qs.filter(student_id=student_id)
            return qs.count()

    # ---------- Submissions ----------
    def get_submission(self, submission_id):
        with _db_errors("get_submission"):
            return self.Submission.objects.filter(pk=submission_id).first()

    def find_submission(self, coursework_id, student_id):
        with _db_errors("find_submission"):
            return self.Submission.objects.filter(coursework_id=coursework_id, student_id=student_id).first()

    def list_submissions(self, *, coursework_id=None, student_id=None):
        with _db_errors("list_submissions"):
            qs = self.Submission.objects.all()
            if coursework_id is not None:
                qs = qs.for_coursework(coursework_id)
            if student_id is not None:
                qs = qs.filter(student_id=student_id) if coursework_id is not None else qs.for_student(student_id)
            return list(qs)

    def save_submission(self, coursework_id, student_id, fields):
        with _db_errors("save_submission"):
            return self.Submission.objects.update_or_create(
                coursework_id=coursework_id, student_id=student_id, defaults=fields
            )

    def update_submission(self, submission_id, **fields):
        return self._update(self.Submission, submission_id, "update_submission", fields)

    def delete_submission(self, submission_id):
        self._delete(self.Submission, submission_id, "delete_submission")

    # ---------- Resources ----------
    def get_resource(self, resource_id):
        with _db_errors("get_resource"):
            return self.CourseResource.objects.filter(pk=resource_id).first()

    def list_resources(self, course_id):
        with _db_errors("list_resources"):
            return list(self.CourseResource.objects.filter(course_id=course_id).order_by("-created_at", "-id"))

    def create_resource(self, **fields):
        with _db_errors("create_resource"), transaction.atomic():
            return self.CourseResource.objects.create(**fields)

    def delete_resource(self, resource_id):
        self._delete(self.CourseResource, resource_id, "delete_resource")


def get_store() -> Store:
    """Instantiate the store configured in ``settings.CLASSROOM["STORE"]``."""
    return import_string(settings.CLASSROOM["STORE"])()
