"""Course domain models: Course, Enrollment, Coursework, CourseResource."""

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator

from simple_history.models import HistoricalRecords

from ClassroomApp.courses.querysets import CourseQuerySet, EnrollmentQuerySet


User = settings.AUTH_USER_MODEL

class Course(models.Model):
    """A course taught by exactly one owning teacher.

    Fields:
        title: Human readable course title.
        description: Optional longer text.
        image_url: Optional cover image.
        teacher: Owning teacher (``teacherId``); courses are transferred before a
            teacher is deleted, hence PROTECT.
        created_at / updated_at: Timestamps.
        history: Audit history (django-simple-history).
    Deleting a course cascades to its enrollments, coursework (and their
    submissions) and resources.
    """
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    image_url = models.URLField(max_length=1024, blank=True, null=True)
    teacher = models.ForeignKey(User, on_delete=models.PROTECT, related_name="taught_courses")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = CourseQuerySet.as_manager()

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"


class Enrollment(models.Model):
    """Membership of a student in a course.

    Constraints:
        uq_enrollment_course_student: a student enrolls in a course at most once.
    """
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="enrollments")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = EnrollmentQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["course", "student"], name="uq_enrollment_course_student"),
        ]

    def __str__(self) -> str:
        return f"{self.student} -> {self.course}"


class Coursework(models.Model):
    """An assignment belonging to exactly one course, with an optional due date."""
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    due_date = models.DateTimeField(blank=True, null=True)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="coursework")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"


class CourseResource(models.Model):
    """Metadata for a file uploaded to the blob store and attached to a course."""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    file_url = models.CharField(max_length=2048)
    file_type = models.CharField(max_length=255)
    file_size = models.PositiveBigIntegerField(validators=[MinValueValidator(0)])
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="resources")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    def __str__(self) -> str:
        return f"{self.name} ({self.file_type}, {self.file_size} bytes)"
