"""
Storage collaborator for uploaded images.

Files are stored under content-addressed names (SHA256 of the bytes), so
uploading the same image twice reuses one path.
"""
import hashlib
import logging
import os
from typing import Protocol

from django.core.exceptions import SuspiciousOperation
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from .exceptions import CollaboratorFailure

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    def upload(self, file_bytes: bytes, path: str) -> str:
        ...


def content_addressed_path(file_bytes, filename, prefix="", suffix=""):
    """
    Return a storage path derived from the file content.

    Args:
        file_bytes: raw file content
        filename: original name, used only for its extension
        prefix: directory prefix, e.g. "hero-images/"
        suffix: marker appended to the hash, e.g. "-thumbnail"
    """
    content_hash = hashlib.sha256(file_bytes).hexdigest()
    extension = os.path.splitext(filename)[1].lower()
    return f"{prefix}{content_hash}{suffix}{extension}"


class DjangoStorageBackend:
    """StorageBackend backed by a Django Storage (default_storage by default)."""

    def __init__(self, storage=None):
        self.storage = storage if storage is not None else default_storage

    def upload(self, file_bytes, path):
        """Save file_bytes at path and return the public URL."""
        try:
            if self.storage.exists(path):
                name = path
            else:
                name = self.storage.save(path, ContentFile(file_bytes))
            url = self.storage.url(name)
        except (OSError, SuspiciousOperation) as exc:
            raise CollaboratorFailure(f"Could not store {path}") from exc

        logger.info("Stored %s (%d bytes)", name, len(file_bytes))
        return url
