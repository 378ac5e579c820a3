"""Media store collaborator.

Releasing an event's uploaded image is best-effort: a storage failure is
logged and never fails the lifecycle operation that triggered it.
"""

import logging
from abc import ABC, abstractmethod

from django.core.files.storage import Storage, default_storage

logger = logging.getLogger(__name__)


class MediaStore(ABC):
    """Deletes stored media files."""

    @abstractmethod
    def delete(self, path: str) -> None:
        ...


class DjangoStorageMediaStore(MediaStore):
    """Deletes files from a Django storage backend."""

    def __init__(self, storage: Storage | None = None) -> None:
        self._storage = storage or default_storage

    def delete(self, path: str) -> None:
        try:
            self._storage.delete(path)
        except (OSError, NotImplementedError):
            logger.warning("Could not release media file %s", path, exc_info=True)
