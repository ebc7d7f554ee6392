"""Abstract interface for object storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Common interface for local storage (dev) and the hosted S3 endpoint (prod)."""

    @abstractmethod
    def upload_bytes(
        self,
        data: bytes,
        object_key: str,
        bucket: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload in-memory bytes. Returns object_key."""

    @abstractmethod
    def delete_object(self, object_key: str, bucket: str) -> None:
        """Delete an object. Silent when the object does not exist."""

    @abstractmethod
    def get_presigned_url(self, object_key: str, bucket: str, expiry: int = 3600) -> str | None:
        """Return a time-limited read URL, or None when the object does not exist."""

    @abstractmethod
    def object_exists(self, object_key: str, bucket: str) -> bool:
        """Check whether an object exists."""


def strip_bucket_prefix(object_key: str, bucket: str) -> str:
    """Turn ``bucket/path`` storage keys into bucket-relative keys."""
    prefix = f"{bucket}/"
    return object_key[len(prefix):] if object_key.startswith(prefix) else object_key
