from django.urls import path, include
from rest_framework_nested import routers
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from ClassroomApp.api.views import (
    MeView,
    DashboardView,
    UserViewSet,
    CourseViewSet,
    CourseworkViewSet,
    EnrollmentViewSet,
    ResourceViewSet,
    SubmissionViewSet,
)

router = routers.SimpleRouter()
router.register(r"users", UserViewSet, basename="user")
router.register(r"courses", CourseViewSet, basename="course")

courses_router = routers.NestedSimpleRouter(router, r"courses", lookup="course")
courses_router.register(r"coursework", CourseworkViewSet, basename="course-coursework")
courses_router.register(r"enrollments", EnrollmentViewSet, basename="course-enrollments")
courses_router.register(r"resources", ResourceViewSet, basename="course-resources")

coursework_router = routers.NestedSimpleRouter(courses_router, r"coursework", lookup="coursework")
coursework_router.register(r"submissions", SubmissionViewSet, basename="coursework-submissions")

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
    path("me/", MeView.as_view(), name="me"),
    path("dashboard/", DashboardView.as_view(), name="dashboard"),
    path("", include(router.urls)),
    path("", include(courses_router.urls)),
    path("", include(coursework_router.urls)),
]
