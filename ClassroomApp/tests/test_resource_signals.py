import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from rest_framework.test import APIClient
from model_bakery import baker

from ClassroomApp.core.choices import UserRole
from ClassroomApp.core.errors import CollaboratorError
from ClassroomApp.domain.storage import BlobStore, StoredBlob

pytestmark = pytest.mark.django_db

REMOVED: list[str] = []


class RecordingBlobStore(BlobStore):
    def upload(self, course_id, filename, content, content_type=None):
        return StoredBlob(f"memory://{course_id}/{filename}", content_type or "application/octet-stream", content.size)

    def remove(self, file_url):
        REMOVED.append(file_url)


class BrokenBlobStore(RecordingBlobStore):
    def remove(self, file_url):
        raise CollaboratorError("blob_remove", "bucket unavailable")


def blob_settings(store_cls):
    return override_settings(CLASSROOM={
        "STORE": "ClassroomApp.domain.repositories.DjangoStore",
        "BLOB_STORE": f"{__name__}.{store_cls.__name__}",
        "RESOURCE_PREFIX": "course-resources",
    })


@pytest.fixture(autouse=True)
def reset_removed():
    REMOVED.clear()


@pytest.fixture
def teacher():
    return baker.make("users.User", email="res-t@example.com", role=UserRole.TEACHER)


@pytest.fixture
def course(teacher):
    return baker.make("courses.Course", title="Art", teacher=teacher)


def test_deleting_resource_removes_blob(course):
    resource = baker.make("courses.CourseResource", course=course, file_url="memory://1/a.pdf", file_size=3)
    with blob_settings(RecordingBlobStore):
        resource.delete()
    assert REMOVED == ["memory://1/a.pdf"]


def test_deleting_course_removes_its_blobs(course):
    baker.make("courses.CourseResource", course=course, file_url="memory://1/a.pdf", file_size=3)
    baker.make("courses.CourseResource", course=course, file_url="memory://1/b.pdf", file_size=3)
    with blob_settings(RecordingBlobStore):
        course.delete()
    assert sorted(REMOVED) == ["memory://1/a.pdf", "memory://1/b.pdf"]


def test_blob_failure_does_not_block_delete(course):
    resource = baker.make("courses.CourseResource", course=course, file_url="memory://1/a.pdf", file_size=3)
    with blob_settings(BrokenBlobStore):
        resource.delete()
    assert not type(resource).objects.filter(pk=resource.pk).exists()


def test_upload_through_api(teacher, course):
    client = APIClient()
    client.force_authenticate(user=teacher)
    upload = SimpleUploadedFile("slides.pdf", b"%PDF-1.4", content_type="application/pdf")

    with blob_settings(RecordingBlobStore):
        resp = client.post(f"/api/v1/courses/{course.id}/resources/", {"file": upload}, format="multipart")
        assert resp.status_code == 201
        assert resp.data["file_url"] == f"memory://{course.id}/slides.pdf"
        assert resp.data["file_type"] == "application/pdf"
        assert resp.data["file_size"] == 8

        deleted = client.delete(f"/api/v1/courses/{course.id}/resources/{resp.data['id']}/")
    assert deleted.status_code == 204
    assert REMOVED == [f"memory://{course.id}/slides.pdf"]


def test_register_existing_file_metadata(teacher, course):
    client = APIClient()
    client.force_authenticate(user=teacher)
    resp = client.post(
        f"/api/v1/courses/{course.id}/resources/",
        {"name": "Reading", "file_url": "https://cdn.example.com/r.pdf", "file_type": "application/pdf", "file_size": 10},
        format="json",
    )
    assert resp.status_code == 201
    bad = client.post(
        f"/api/v1/courses/{course.id}/resources/",
        {"name": "Bad", "file_url": "x", "file_type": "text/plain", "file_size": -5},
        format="json",
    )
    assert bad.status_code == 400
