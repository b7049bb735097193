"""Field validators shared by models and domain services."""

from typing import Any

from django.core.exceptions import ValidationError

from ClassroomApp.core.choices import UserRole

GRADE_MIN = 0
GRADE_MAX = 100


def validate_grade(value: Any) -> None:
    """Ensure a grade is an integer within 0–100 inclusive."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Grade must be an integer.")
    if not (GRADE_MIN <= value <= GRADE_MAX):
        raise ValidationError(f"Grade must be between {GRADE_MIN} and {GRADE_MAX}.")


def validate_file_size(value: Any) -> None:
    """Ensure a stored file size (bytes) is a non-negative integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("File size must be a non-negative number of bytes.")


def validate_role(value: Any) -> None:
    """Ensure a role is one of Admin, Teacher, Student."""
    if value not in UserRole.values:
        raise ValidationError(f"Unknown role: {value}")


def first_message(exc: ValidationError) -> str:
    return exc.messages[0] if exc.messages else "Invalid value."
