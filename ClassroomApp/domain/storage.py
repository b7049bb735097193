"""Blob-store collaborator for course resource files."""

import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.module_loading import import_string

from ClassroomApp.core.errors import CollaboratorError

logger = logging.getLogger(__name__)

DEFAULT_FILE_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredBlob:
    """Durable location of uploaded bytes plus the metadata echoed back."""
    file_url: str
    file_type: str
    file_size: int


class BlobStore(ABC):
    @abstractmethod
    def upload(self, course_id: Any, filename: str, content: Any, content_type: str | None = None) -> StoredBlob:
        """Persist ``content`` (a file-like object) and return where it lives."""

    @abstractmethod
    def remove(self, file_url: str) -> None:
        """Delete the blob behind ``file_url`` if it is one of ours."""


def blob_name(prefix: str, course_id: Any, filename: str, now_ms: int | None = None) -> str:
    """Build ``<prefix>/<course_id>/<epoch ms>-<filename with whitespace as dashes>``."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    safe = re.sub(r"\s+", "-", filename.strip()) or "file"
    return f"{prefix}/{course_id}/{stamp}-{safe}"


class DjangoStorageBlobStore(BlobStore):
    """Blob store on top of Django's ``default_storage`` (filesystem, S3, ...)."""

    def __init__(self, storage: Any = None, prefix: str | None = None) -> None:
        self.storage = storage or default_storage
        self.prefix = prefix or settings.CLASSROOM.get("RESOURCE_PREFIX", "course-resources")

    def upload(self, course_id, filename, content, content_type=None):
        name = blob_name(self.prefix, course_id, filename)
        try:
            saved = self.storage.save(name, content)
            url = self.storage.url(saved)
            size = self.storage.size(saved)
        except OSError as exc:
            raise CollaboratorError("blob_upload", str(exc)) from exc
        logger.info("Stored blob %s (%s bytes)", saved, size)
        return StoredBlob(file_url=url, file_type=content_type or DEFAULT_FILE_TYPE, file_size=size)

    def path_from_url(self, file_url: str) -> str | None:
        """Extract the storage name from a URL produced by :meth:`upload`."""
        marker = f"{self.prefix}/"
        if marker not in file_url:
            return None
        return marker + file_url.split(marker, 1)[1].split("?", 1)[0]

    def remove(self, file_url):
        name = self.path_from_url(file_url)
        if name is None:
            return
        try:
            self.storage.delete(name)
        except OSError as exc:
            raise CollaboratorError("blob_remove", str(exc)) from exc


def get_blob_store() -> BlobStore:
    """Instantiate the blob store configured in ``settings.CLASSROOM["BLOB_STORE"]``."""
    return import_string(settings.CLASSROOM["BLOB_STORE"])()
