"""REST API views for users, courses, coursework, enrollments, resources and submissions.

Views translate HTTP into domain service calls; every authorization and lifecycle
rule is decided by the services.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiResponse,
    OpenApiParameter,
)

from ClassroomApp.api.mixins import ServiceResultMixin
from ClassroomApp.core.policy import Actor
from ClassroomApp.api.throttles import SubmissionRateThrottle
from ClassroomApp.domain.services import (
    course_service,
    enrollment_service,
    resource_service,
    submission_service,
    user_service,
)
from ClassroomApp.api.serializers import (
    UserSerializer,
    UserCreateSerializer,
    ProfileUpdateSerializer,
    RoleChangeSerializer,
    CourseWriteSerializer,
    CourseReadSerializer,
    CourseDetailsSerializer,
    CourseworkWriteSerializer,
    CourseworkReadSerializer,
    EnrollmentWriteSerializer,
    EnrollmentReadSerializer,
    SubmissionWriteSerializer,
    SubmissionReadSerializer,
    GradeWriteSerializer,
    ResourceUploadSerializer,
    ResourceWriteSerializer,
    CourseResourceReadSerializer,
    DashboardStatsSerializer,
)

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Forbidden"),
    404: OpenApiResponse(description="Not Found"),
    503: OpenApiResponse(description="Persistence, identity or storage collaborator unavailable."),
}

VALIDATION_RESPONSE = {
    400: OpenApiResponse(description="Validation failed."),
}

CONFLICT_RESPONSE = {
    409: OpenApiResponse(description="Already exists."),
}

COURSE_PARAM = OpenApiParameter("course_pk", int, OpenApiParameter.PATH)
COURSEWORK_PARAM = OpenApiParameter("coursework_pk", int, OpenApiParameter.PATH)


# ---------- Me / Dashboard ----------
@extend_schema(tags=["Users"], responses={200: UserSerializer, **AUTH_RESPONSES})
class MeView(APIView):
    """The signed-in user, as reconciled by identity sync."""

    def get(self, request: Request) -> Response:
        return Response(UserSerializer(request.user).data)


@extend_schema(tags=["Dashboard"], responses={200: DashboardStatsSerializer, **AUTH_RESPONSES})
class DashboardView(APIView):
    """Counts scoped to the caller's role."""

    def get(self, request: Request) -> Response:
        stats = course_service.dashboard_stats(Actor.of(request.user)).unwrap()
        return Response(DashboardStatsSerializer(stats).data)


# ---------- Users ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Users"],
        parameters=[OpenApiParameter("role", str, OpenApiParameter.QUERY, required=False)],
        responses={200: UserSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(tags=["Users"], responses={200: UserSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Users"],
        request=UserCreateSerializer,
        responses={201: UserSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **CONFLICT_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    partial_update=extend_schema(
        tags=["Users"],
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"], "ownership": "self"}},
    ),
    destroy=extend_schema(
        tags=["Users"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES, **CONFLICT_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
)
class UserViewSet(ServiceResultMixin, viewsets.GenericViewSet):
    """User administration and profile updates."""
    serializer_class = UserSerializer
    lookup_value_regex = r"\d+"

    def list(self, request: Request) -> Response:
        role = request.query_params.get("role")
        return self.respond_list(user_service.list_users(self.actor, role.upper() if role else None), UserSerializer)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        return self.respond(user_service.get_user(self.actor, int(pk)), UserSerializer)

    def create(self, request: Request) -> Response:
        ser = UserCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = user_service.create_user(self.actor, **ser.validated_data)
        return self.respond(result, UserSerializer, status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        ser = ProfileUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return self.respond(user_service.update_profile(self.actor, int(pk), ser.validated_data), UserSerializer)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        return self.respond(user_service.delete_user(self.actor, int(pk)))

    @extend_schema(
        tags=["Users"],
        request=RoleChangeSerializer,
        responses={200: UserSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    )
    @action(detail=True, methods=["patch"], url_path="role")
    def role(self, request: Request, pk: str | None = None) -> Response:
        """Change a user's role (administrators only)."""
        ser = RoleChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = user_service.change_role(self.actor, int(pk), ser.validated_data["role"].upper())
        return self.respond(result, UserSerializer)

    @extend_schema(tags=["Submissions"], responses={200: SubmissionReadSerializer(many=True), **AUTH_RESPONSES})
    @action(detail=True, methods=["get"], url_path="submissions")
    def submissions(self, request: Request, pk: str | None = None) -> Response:
        """All submissions of a student (the student themself or an administrator)."""
        return self.respond_list(submission_service.list_for_student(self.actor, int(pk)), SubmissionReadSerializer)

    @extend_schema(tags=["Enrollments"], responses={200: EnrollmentReadSerializer(many=True), **AUTH_RESPONSES})
    @action(detail=True, methods=["get"], url_path="enrollments")
    def enrollments(self, request: Request, pk: str | None = None) -> Response:
        """Courses a student is enrolled in."""
        return self.respond_list(enrollment_service.enrolled_courses(self.actor, int(pk)), EnrollmentReadSerializer)


# ---------- Courses ----------
@extend_schema_view(
    list=extend_schema(tags=["Courses"], responses={200: CourseReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Courses"], responses={200: CourseDetailsSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={201: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"]}},
    ),
    partial_update=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
    destroy=extend_schema(
        tags=["Courses"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
)
class CourseViewSet(ServiceResultMixin, viewsets.GenericViewSet):
    """Course lifecycle; visibility and ownership decided by the course service."""
    serializer_class = CourseReadSerializer
    lookup_value_regex = r"\d+"

    def list(self, request: Request) -> Response:
        return self.respond_list(course_service.list_courses(self.actor), CourseReadSerializer)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """Course page data: coursework for members, enrollments for managers."""
        return self.respond(course_service.get_course_details(self.actor, int(pk)), CourseDetailsSerializer)

    def create(self, request: Request) -> Response:
        ser = CourseWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = course_service.create_course(self.actor, **ser.validated_data)
        return self.respond(result, CourseReadSerializer, status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        ser = CourseWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return self.respond(course_service.update_course(self.actor, int(pk), ser.validated_data), CourseReadSerializer)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        return self.respond(course_service.delete_course(self.actor, int(pk)))

    @extend_schema(tags=["Enrollments"], responses={200: UserSerializer(many=True), **AUTH_RESPONSES})
    @action(detail=True, methods=["get"], url_path="available-students")
    def available_students(self, request: Request, pk: str | None = None) -> Response:
        """Students who can still be enrolled in this course."""
        return self.respond_list(enrollment_service.list_available_students(self.actor, int(pk)), UserSerializer)


# ---------- Coursework ----------
@extend_schema_view(
    list=extend_schema(tags=["Coursework"], responses={200: CourseworkReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Coursework"], responses={200: CourseworkReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Coursework"],
        request=CourseworkWriteSerializer,
        responses={201: CourseworkReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
    partial_update=extend_schema(
        tags=["Coursework"],
        request=CourseworkWriteSerializer,
        responses={200: CourseworkReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
    destroy=extend_schema(
        tags=["Coursework"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
)
@extend_schema(parameters=[COURSE_PARAM])
class CourseworkViewSet(ServiceResultMixin, viewsets.GenericViewSet):
    serializer_class = CourseworkReadSerializer
    lookup_value_regex = r"\d+"

    def list(self, request: Request, course_pk: str | None = None) -> Response:
        return self.respond_list(course_service.list_coursework(self.actor, int(course_pk)), CourseworkReadSerializer)

    def retrieve(self, request: Request, pk: str | None = None, course_pk: str | None = None) -> Response:
        result = course_service.get_coursework(self.actor, int(pk), course_id=int(course_pk))
        return self.respond(result, CourseworkReadSerializer)

    def create(self, request: Request, course_pk: str | None = None) -> Response:
        ser = CourseworkWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = course_service.add_coursework(self.actor, int(course_pk), **ser.validated_data)
        return self.respond(result, CourseworkReadSerializer, status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None, course_pk: str | None = None) -> Response:
        ser = CourseworkWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        result = course_service.update_coursework(self.actor, int(pk), ser.validated_data, course_id=int(course_pk))
        return self.respond(result, CourseworkReadSerializer)

    def destroy(self, request: Request, pk: str | None = None, course_pk: str | None = None) -> Response:
        return self.respond(course_service.delete_coursework(self.actor, int(pk), course_id=int(course_pk)))


# ---------- Enrollments ----------
@extend_schema_view(
    list=extend_schema(tags=["Enrollments"], responses={200: EnrollmentReadSerializer(many=True), **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Enrollments"],
        request=EnrollmentWriteSerializer,
        responses={201: EnrollmentReadSerializer, **AUTH_RESPONSES, **CONFLICT_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
    destroy=extend_schema(
        tags=["Enrollments"],
        responses={204: OpenApiResponse(description="Removed"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
)
@extend_schema(parameters=[COURSE_PARAM])
class EnrollmentViewSet(ServiceResultMixin, viewsets.GenericViewSet):
    serializer_class = EnrollmentReadSerializer
    lookup_value_regex = r"\d+"

    def list(self, request: Request, course_pk: str | None = None) -> Response:
        return self.respond_list(enrollment_service.list_enrollments(self.actor, int(course_pk)), EnrollmentReadSerializer)

    def create(self, request: Request, course_pk: str | None = None) -> Response:
        ser = EnrollmentWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = enrollment_service.enroll(self.actor, int(course_pk), ser.validated_data["student_id"])
        return self.respond(result, EnrollmentReadSerializer, status.HTTP_201_CREATED)

    def destroy(self, request: Request, pk: str | None = None, course_pk: str | None = None) -> Response:
        return self.respond(enrollment_service.unenroll(self.actor, int(pk), course_id=int(course_pk)))


# ---------- Resources ----------
@extend_schema_view(
    list=extend_schema(tags=["Resources"], responses={200: CourseResourceReadSerializer(many=True), **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Resources"],
        request={"multipart/form-data": ResourceUploadSerializer, "application/json": ResourceWriteSerializer},
        description=(
            "Attach a resource. Multipart requests carrying `file` are uploaded to the blob store "
            "first; JSON requests register metadata for a file that is already stored."
        ),
        responses={201: CourseResourceReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
    destroy=extend_schema(
        tags=["Resources"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    ),
)
@extend_schema(parameters=[COURSE_PARAM])
class ResourceViewSet(ServiceResultMixin, viewsets.GenericViewSet):
    serializer_class = CourseResourceReadSerializer
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    lookup_value_regex = r"\d+"

    def list(self, request: Request, course_pk: str | None = None) -> Response:
        return self.respond_list(resource_service.list_resources(self.actor, int(course_pk)), CourseResourceReadSerializer)

    def create(self, request: Request, course_pk: str | None = None) -> Response:
        if "file" in request.data:
            ser = ResourceUploadSerializer(data=request.data)
            ser.is_valid(raise_exception=True)
            result = resource_service.upload_resource(
                self.actor,
                int(course_pk),
                ser.validated_data["file"],
                name=ser.validated_data.get("name"),
                description=ser.validated_data.get("description"),
            )
        else:
            ser = ResourceWriteSerializer(data=request.data)
            ser.is_valid(raise_exception=True)
            result = resource_service.add_resource(self.actor, int(course_pk), **ser.validated_data)
        return self.respond(result, CourseResourceReadSerializer, status.HTTP_201_CREATED)

    def destroy(self, request: Request, pk: str | None = None, course_pk: str | None = None) -> Response:
        return self.respond(resource_service.delete_resource(self.actor, int(pk), course_id=int(course_pk)))


# ---------- Submissions ----------
@extend_schema_view(
    list=extend_schema(tags=["Submissions"], responses={200: SubmissionReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Submissions"], responses={200: SubmissionReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Submissions"],
        request=SubmissionWriteSerializer,
        description=(
            "Submit or resubmit. A resubmission overwrites the previous submission and clears its "
            "grade and feedback. Endpoint is rate-limited."
        ),
        responses={
            201: SubmissionReadSerializer,
            429: OpenApiResponse(description="Too many requests / throttled."),
            **AUTH_RESPONSES,
            **VALIDATION_RESPONSE,
        },
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
    destroy=extend_schema(
        tags=["Submissions"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher", "student"], "ownership": "submission-owner"}},
    ),
)
@extend_schema(parameters=[COURSE_PARAM, COURSEWORK_PARAM])
class SubmissionViewSet(ServiceResultMixin, viewsets.GenericViewSet):
    """Submission creation, grading, withdrawal and listing with throttling."""
    serializer_class = SubmissionReadSerializer
    throttle_classes: list[type] = []
    lookup_value_regex = r"\d+"

    def get_throttles(self):
        """Apply rate throttle only on create."""
        if self.action == "create":
            self.throttle_classes = [SubmissionRateThrottle]
        return super().get_throttles()

    def parents(self) -> dict[str, int]:
        """The coursework and course named in the URL; rows outside them are not found."""
        return {
            "coursework_id": int(self.kwargs["coursework_pk"]),
            "course_id": int(self.kwargs["course_pk"]),
        }

    def list(self, request: Request, course_pk: str | None = None, coursework_pk: str | None = None) -> Response:
        result = submission_service.list_for_coursework(self.actor, int(coursework_pk), course_id=int(course_pk))
        return self.respond_list(result, SubmissionReadSerializer)

    def retrieve(self, request: Request, pk: str | None = None, **kwargs) -> Response:
        return self.respond(submission_service.get(self.actor, int(pk), **self.parents()), SubmissionReadSerializer)

    def create(self, request: Request, course_pk: str | None = None, coursework_pk: str | None = None) -> Response:
        ser = SubmissionWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = submission_service.submit(
            self.actor,
            int(coursework_pk),
            ser.validated_data.get("student_id", self.actor.id),
            ser.validated_data["content"],
            ser.validated_data.get("file_url"),
            course_id=int(course_pk),
        )
        return self.respond(result, SubmissionReadSerializer, status.HTTP_201_CREATED)

    def destroy(self, request: Request, pk: str | None = None, **kwargs) -> Response:
        return self.respond(submission_service.delete(self.actor, int(pk), **self.parents()))

    @extend_schema(
        tags=["Submissions"],
        request=GradeWriteSerializer,
        responses={200: SubmissionReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin", "teacher"], "ownership": "course-teacher"}},
    )
    @action(detail=True, methods=["post"], url_path="grade")
    def grade(self, request: Request, pk: str | None = None, **kwargs) -> Response:
        """Grade a submission (0–100) with optional feedback."""
        ser = GradeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = submission_service.grade(
            self.actor,
            int(pk),
            ser.validated_data["grade"],
            ser.validated_data.get("feedback"),
            **self.parents(),
        )
        return self.respond(result, SubmissionReadSerializer)
