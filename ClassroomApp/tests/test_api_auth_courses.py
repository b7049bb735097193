import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken
from model_bakery import baker

from ClassroomApp.core.choices import UserRole

pytestmark = [pytest.mark.django_db, pytest.mark.usefixtures("clear_throttle_cache")]

ME_URL = "/api/v1/me/"
COURSES_URL = "/api/v1/courses/"
USERS_URL = "/api/v1/users/"


def bearer(sub, email, **metadata):
    token = AccessToken()
    token["sub"] = sub
    token["email"] = email
    token["user_metadata"] = metadata
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


def login(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def items(response):
    data = response.data
    if isinstance(data, dict) and "results" in data:
        return data["results"]
    return data


@pytest.fixture
def admin():
    return baker.make("users.User", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def teacher():
    return baker.make("users.User", email="t@example.com", full_name="Tess", role=UserRole.TEACHER)


@pytest.fixture
def student():
    return baker.make("users.User", email="s@example.com", full_name="Stu", role=UserRole.STUDENT)


def test_first_sign_in_creates_student_profile():
    resp = bearer("ext-100", "fresh@example.com", full_name="Fresh Face").get(ME_URL)
    assert resp.status_code == 200
    assert resp.data["email"] == "fresh@example.com"
    assert resp.data["full_name"] == "Fresh Face"
    assert resp.data["role"] == UserRole.STUDENT


def test_sign_in_updates_profile_but_not_role():
    bearer("ext-200", "first@example.com", full_name="First").get(ME_URL)
    from django.contrib.auth import get_user_model
    get_user_model().objects.filter(external_id="ext-200").update(role=UserRole.TEACHER)

    resp = bearer("ext-200", "second@example.com", full_name="Second").get(ME_URL)
    assert resp.data["email"] == "second@example.com"
    assert resp.data["full_name"] == "Second"
    assert resp.data["role"] == UserRole.TEACHER


def test_missing_or_bad_token_is_401():
    assert APIClient().get(ME_URL).status_code == 401
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
    assert client.get(COURSES_URL).status_code == 401


def test_course_create_and_ownership(teacher, student):
    t_client = login(teacher)
    resp = t_client.post(COURSES_URL, {"title": "Algebra", "description": ""}, format="json")
    assert resp.status_code == 201
    course_id = resp.data["id"]
    assert resp.data["teacher"]["id"] == teacher.id

    assert login(student).post(COURSES_URL, {"title": "Mine"}, format="json").status_code == 403
    assert login(student).patch(f"{COURSES_URL}{course_id}/", {"title": "Hack"}, format="json").status_code == 403
    assert login(student).get(f"{COURSES_URL}{course_id}/").status_code == 403


def test_enroll_conflict_and_member_visibility(teacher, student):
    t_client = login(teacher)
    course_id = t_client.post(COURSES_URL, {"title": "Course"}, format="json").data["id"]
    enroll_url = f"{COURSES_URL}{course_id}/enrollments/"

    assert t_client.post(enroll_url, {"student_id": student.id}, format="json").status_code == 201
    assert t_client.post(enroll_url, {"student_id": student.id}, format="json").status_code == 409
    assert len(items(t_client.get(enroll_url))) == 1

    s_client = login(student)
    assert [c["id"] for c in items(s_client.get(COURSES_URL))] == [course_id]
    details = s_client.get(f"{COURSES_URL}{course_id}/")
    assert details.status_code == 200
    assert details.data["is_enrolled"] is True
    assert details.data["enrollments"] == []


def test_coursework_is_managed_by_owner(teacher, student):
    t_client = login(teacher)
    course_id = t_client.post(COURSES_URL, {"title": "Course"}, format="json").data["id"]
    url = f"{COURSES_URL}{course_id}/coursework/"

    created = t_client.post(url, {"title": "Essay"}, format="json")
    assert created.status_code == 201
    assert login(student).post(url, {"title": "Mine"}, format="json").status_code == 403
    assert t_client.patch(f"{url}{created.data['id']}/", {"title": "Long essay"}, format="json").data["title"] == "Long essay"


def test_enrollment_and_coursework_under_wrong_course_are_404(teacher, student):
    t_client = login(teacher)
    course_id = t_client.post(COURSES_URL, {"title": "Course"}, format="json").data["id"]
    other_id = t_client.post(COURSES_URL, {"title": "Other"}, format="json").data["id"]
    enrollment_id = t_client.post(
        f"{COURSES_URL}{course_id}/enrollments/", {"student_id": student.id}, format="json"
    ).data["id"]
    work_id = t_client.post(f"{COURSES_URL}{course_id}/coursework/", {"title": "Essay"}, format="json").data["id"]

    assert t_client.delete(f"{COURSES_URL}{other_id}/enrollments/{enrollment_id}/").status_code == 404
    assert t_client.patch(f"{COURSES_URL}{other_id}/coursework/{work_id}/", {"title": "X"}, format="json").status_code == 404
    assert t_client.delete(f"{COURSES_URL}{other_id}/coursework/{work_id}/").status_code == 404

    assert len(items(t_client.get(f"{COURSES_URL}{course_id}/enrollments/"))) == 1
    assert t_client.get(f"{COURSES_URL}{course_id}/coursework/{work_id}/").data["title"] == "Essay"


def test_admin_changes_role(admin, student):
    resp = login(admin).patch(f"{USERS_URL}{student.id}/role/", {"role": "teacher"}, format="json")
    assert resp.status_code == 200
    assert resp.data["role"] == UserRole.TEACHER
    assert login(student).patch(f"{USERS_URL}{student.id}/role/", {"role": "ADMIN"}, format="json").status_code == 403


def test_dashboard_for_admin(admin, teacher, student):
    resp = login(admin).get("/api/v1/dashboard/")
    assert resp.status_code == 200
    assert resp.data["student_count"] == 1
    assert resp.data["teacher_count"] == 1
