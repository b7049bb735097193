import pytest
from django.core.cache import cache

from ClassroomApp.core.choices import UserRole
from ClassroomApp.tests.fakes import FakeBlobStore, InMemoryStore


@pytest.fixture
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def admin(store):
    return store.add_user(UserRole.ADMIN, email="admin@example.com", full_name="Ada Admin")


@pytest.fixture
def teacher(store):
    return store.add_user(UserRole.TEACHER, email="teacher@example.com", full_name="Tom Teacher")


@pytest.fixture
def other_teacher(store):
    return store.add_user(UserRole.TEACHER, email="other@example.com", full_name="Olga Other")


@pytest.fixture
def student(store):
    return store.add_user(UserRole.STUDENT, email="student@example.com", full_name="Sam Student")


@pytest.fixture
def other_student(store):
    return store.add_user(UserRole.STUDENT, email="student2@example.com", full_name="Sue Second")


@pytest.fixture
def course(store, teacher):
    return store.add_course(teacher.id, title="Algebra")


@pytest.fixture
def coursework(store, course):
    return store.add_coursework(course.id, title="Homework 1")
