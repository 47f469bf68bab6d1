"""File store port — abstract interface for binary uploads (signatures, photos)."""

from abc import ABC, abstractmethod


class FileStorePort(ABC):
    """Abstract interface for file storage adapters."""

    @abstractmethod
    def put(self, path: str, content: bytes, content_type: str, bucket: str | None = None) -> dict:
        """Store ``content`` at ``path``.

        Returns:
            dict with keys: file_id, path, bucket, size, content_type
        """
        ...

    @abstractmethod
    def get(self, path: str) -> bytes | None:
        """Return the stored bytes, or None when nothing is stored at ``path``."""
        ...
