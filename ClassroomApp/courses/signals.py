"""Signal handlers for course resources (drop the stored blob once its row is gone)."""

import logging
from typing import Any

from django.db.models.signals import post_delete
from django.dispatch import receiver

from ClassroomApp.core.errors import CollaboratorError
from ClassroomApp.courses.models import CourseResource
from ClassroomApp.domain.storage import get_blob_store

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=CourseResource)
def remove_resource_blob(
    sender: type[CourseResource],
    instance: CourseResource,
    **kwargs: Any,
) -> None:
    """Remove the uploaded file; a storage failure is logged and the delete stands."""
    try:
        get_blob_store().remove(instance.file_url)
    except CollaboratorError as exc:
        logger.warning("Could not remove blob for resource %s (%s): %s", instance.pk, instance.file_url, exc)
