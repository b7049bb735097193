"""Learning domain models: Submission."""

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator

from ClassroomApp.courses.models import Coursework
from ClassroomApp.core.choices import SubmissionState
from ClassroomApp.learning.querysets import SubmissionQuerySet

from simple_history.models import HistoricalRecords

User = settings.AUTH_USER_MODEL


class Submission(models.Model):
    """A student's work for a coursework item (unique per coursework+student).

    A resubmission overwrites this row and clears ``grade``/``feedback``.
    """
    coursework = models.ForeignKey(Coursework, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="submissions")
    content = models.TextField(blank=True)
    file_url = models.CharField(max_length=2048, blank=True, null=True)
    grade = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    feedback = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = SubmissionQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["coursework", "student"], name="uq_coursework_student"),
        ]

    @property
    def state(self) -> str:
        return SubmissionState.SUBMITTED if self.grade is None else SubmissionState.GRADED

    def __str__(self) -> str:
        return f"Submission #{self.pk} by {self.student_id} for {self.coursework_id}"
