"""Courses app configuration (registers signal handlers)."""

from django.apps import AppConfig

class CoursesConfig(AppConfig):
    """AppConfig for courses, enrollments, coursework and course resources."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "ClassroomApp.courses"

    def ready(self):
        """Import signal handlers to connect Django model signals."""
        from ClassroomApp.courses import signals  # noqa: F401
