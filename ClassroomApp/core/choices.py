"""Typed enumerations (TextChoices) for user roles and submission states."""
from django.db import models

class UserRole(models.TextChoices):
    """System-level role assigned to a user account; the set is closed."""
    ADMIN = "ADMIN", "Admin"
    TEACHER = "TEACHER", "Teacher"
    STUDENT = "STUDENT", "Student"

class SubmissionState(models.TextChoices):
    """Lifecycle states of a (coursework, student) submission."""
    UNSUBMITTED = "UNSUBMITTED", "Unsubmitted"
    SUBMITTED = "SUBMITTED", "Submitted"
    GRADED = "GRADED", "Graded"
