"""Domain service functions for course file resources.

The bytes are handed to the blob store first; these functions only record the
resulting metadata against the course, removing the blob again if that fails.
Blob cleanup on delete is handled by the ``post_delete`` signal in
``courses.signals``.
"""

import logging
from typing import Any

from django.core.exceptions import ValidationError

from ClassroomApp.core import policy
from ClassroomApp.core.errors import CollaboratorError, Result, collaborator_boundary, invalid, not_found
from ClassroomApp.core.policy import Action, OwnershipFacts
from ClassroomApp.core.validators import first_message, validate_file_size
from ClassroomApp.domain.repositories import Store, get_store
from ClassroomApp.domain.storage import BlobStore, get_blob_store

logger = logging.getLogger(__name__)


def _authorize(store: Store, actor: Any, course_id: Any, action: Action) -> Result | None:
    course = store.get_course(course_id)
    if course is None:
        return not_found("Course")
    facts = OwnershipFacts(course_teacher_id=course.teacher_id)
    if action is Action.VIEW_COURSE:
        facts = OwnershipFacts(
            course_teacher_id=course.teacher_id,
            enrolled=store.find_enrollment(course.id, actor.id) is not None,
        )
    denied = policy.authorize(actor, action, facts)
    return Result.from_error(denied) if denied else None


@collaborator_boundary
def add_resource(
    actor: Any,
    course_id: Any,
    name: str,
    file_url: str,
    file_type: str,
    file_size: int,
    description: str | None = None,
    *,
    store: Store | None = None,
) -> Result:
    """Attach already-uploaded file metadata to a course."""
    store = store or get_store()
    failure = _authorize(store, actor, course_id, Action.MANAGE_RESOURCES)
    if failure:
        return failure
    try:
        validate_file_size(file_size)
    except ValidationError as exc:
        return invalid(first_message(exc))
    resource = store.create_resource(
        course_id=course_id,
        name=name,
        description=description,
        file_url=file_url,
        file_type=file_type,
        file_size=file_size,
    )
    logger.info("Resource %s added to course %s by user %s", resource.id, course_id, actor.id)
    return Result.success(resource)


@collaborator_boundary
def upload_resource(
    actor: Any,
    course_id: Any,
    upload: Any,
    name: str | None = None,
    description: str | None = None,
    *,
    store: Store | None = None,
    blob_store: BlobStore | None = None,
) -> Result:
    """Authorize, push ``upload`` to the blob store, then record it.

    ``upload`` is a Django ``UploadedFile`` (anything with ``name``, ``content_type``
    and file-like reads).
    """
    store = store or get_store()
    blob_store = blob_store or get_blob_store()
    failure = _authorize(store, actor, course_id, Action.MANAGE_RESOURCES)
    if failure:
        return failure
    stored = blob_store.upload(course_id, upload.name, upload, getattr(upload, "content_type", None))
    result = add_resource(
        actor,
        course_id,
        name or upload.name,
        stored.file_url,
        stored.file_type,
        stored.file_size,
        description,
        store=store,
    )
    if not result.ok:
        try:
            blob_store.remove(stored.file_url)
        except CollaboratorError as exc:
            logger.warning("Could not remove orphaned blob %s: %s", stored.file_url, exc)
    return result


@collaborator_boundary
def delete_resource(
    actor: Any,
    resource_id: Any,
    *,
    course_id: Any = None,
    store: Store | None = None,
) -> Result:
    """Delete a resource; with ``course_id`` it must belong to that course."""
    store = store or get_store()
    resource = store.get_resource(resource_id)
    if resource is None or (course_id is not None and resource.course_id != course_id):
        return not_found("Resource")
    failure = _authorize(store, actor, resource.course_id, Action.MANAGE_RESOURCES)
    if failure:
        return failure
    store.delete_resource(resource.id)
    logger.info("Resource %s deleted by user %s", resource.id, actor.id)
    return Result.success(None)


@collaborator_boundary
def list_resources(actor: Any, course_id: Any, *, store: Store | None = None) -> Result:
    store = store or get_store()
    failure = _authorize(store, actor, course_id, Action.VIEW_COURSE)
    if failure:
        return failure
    return Result.success(store.list_resources(course_id))
