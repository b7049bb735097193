"""Serializers for users, courses, enrollments, coursework, submissions and resources.

Write serializers only shape input; business rules (grade range, roles, ownership)
live in the domain services so they are checked in one place.
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model

from ClassroomApp.courses.models import Course, Coursework, CourseResource, Enrollment
from ClassroomApp.learning.models import Submission
from ClassroomApp.core.choices import UserRole, SubmissionState

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public, safe representation of a user."""

    class Meta:
        model = User
        fields = ["id", "email", "full_name", "avatar_url", "role", "created_at", "updated_at"]


class UserCreateSerializer(serializers.Serializer):
    """Admin pre-registration of a user."""
    email = serializers.EmailField()
    full_name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.STUDENT)
    avatar_url = serializers.URLField(required=False, allow_null=True)


class ProfileUpdateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255, required=False)
    avatar_url = serializers.URLField(required=False, allow_null=True)


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.CharField(help_text="One of ADMIN, TEACHER, STUDENT.")


class CourseWriteSerializer(serializers.Serializer):
    """Serializer for creating/updating a course."""
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    image_url = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    teacher_id = serializers.IntegerField(
        required=False,
        help_text="Owning teacher; only administrators may set someone other than themselves."
    )


class CourseReadSerializer(serializers.ModelSerializer):
    """Serializer for reading course details including the owning teacher."""
    teacher = UserSerializer(read_only=True)

    class Meta:
        model = Course
        fields = ["id", "title", "description", "image_url", "teacher", "created_at", "updated_at"]


class EnrollmentWriteSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()


class EnrollmentReadSerializer(serializers.ModelSerializer):
    student = UserSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = ["id", "course", "student", "created_at", "updated_at"]


class CourseworkWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    due_date = serializers.DateTimeField(required=False, allow_null=True)


class CourseworkReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coursework
        fields = ["id", "course", "title", "description", "due_date", "created_at", "updated_at"]


class SubmissionWriteSerializer(serializers.Serializer):
    """Serializer for submitting or resubmitting work."""
    content = serializers.CharField(allow_blank=True, help_text="Textual answer.")
    file_url = serializers.CharField(
        required=False,
        allow_null=True,
        max_length=2048,
        help_text="URL of an already uploaded file; omitted means no file for this version."
    )
    student_id = serializers.IntegerField(
        required=False,
        help_text="Submit on behalf of this student (teachers/admins only). Defaults to yourself."
    )


class GradeWriteSerializer(serializers.Serializer):
    """Grade payload; the 0–100 range is enforced by the submission service."""
    grade = serializers.IntegerField()
    feedback = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SubmissionReadSerializer(serializers.ModelSerializer):
    """Detailed submission view including grade, feedback and lifecycle state."""
    student = UserSerializer(read_only=True)
    state = serializers.ChoiceField(choices=SubmissionState.choices, read_only=True)

    class Meta:
        model = Submission
        fields = [
            "id", "coursework", "student", "content", "file_url",
            "grade", "feedback", "state", "created_at", "updated_at",
        ]
        read_only_fields = fields


class ResourceUploadSerializer(serializers.Serializer):
    file = serializers.FileField(help_text="Resource file; stored in the blob store before the row is created.")
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ResourceWriteSerializer(serializers.Serializer):
    """Metadata for a file that is already in the blob store."""
    name = serializers.CharField(max_length=255)
    file_url = serializers.CharField(max_length=2048)
    file_type = serializers.CharField(max_length=255)
    file_size = serializers.IntegerField(help_text="Size in bytes; must not be negative.")
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CourseResourceReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = CourseResource
        fields = ["id", "course", "name", "description", "file_url", "file_type", "file_size", "created_at"]


class CourseDetailsSerializer(serializers.Serializer):
    course = CourseReadSerializer()
    is_enrolled = serializers.BooleanField()
    enrollments = EnrollmentReadSerializer(many=True)
    coursework = CourseworkReadSerializer(many=True)
    available_students = UserSerializer(many=True)


class DashboardStatsSerializer(serializers.Serializer):
    course_count = serializers.IntegerField()
    student_count = serializers.IntegerField()
    teacher_count = serializers.IntegerField()
    enrollment_count = serializers.IntegerField()
