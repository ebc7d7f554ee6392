"""Local filesystem storage backend used in development."""

from __future__ import annotations

from pathlib import Path

import structlog

from .base import StorageBackend

logger = structlog.get_logger(__name__)


class LocalStorageBackend(StorageBackend):
    """
    Filesystem backend emulating the bucket interface on local disk.

    Objects are stored under base_dir/{bucket}/{object_key}.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def _resolve(self, object_key: str, bucket: str) -> Path:
        root = (self.base_dir / bucket).resolve()
        path = (root / object_key).resolve()
        if root != path and root not in path.parents:
            raise ValueError(f"Object key escapes bucket: {object_key}")
        return path

    def upload_bytes(
        self,
        data: bytes,
        object_key: str,
        bucket: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        dest = self._resolve(object_key, bucket)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        logger.debug("local_storage.uploaded_bytes", key=object_key, bucket=bucket, size=len(data))
        return object_key

    def delete_object(self, object_key: str, bucket: str) -> None:
        path = self._resolve(object_key, bucket)
        if path.exists():
            path.unlink()
            logger.debug("local_storage.deleted", key=object_key, bucket=bucket)

    def get_presigned_url(self, object_key: str, bucket: str, expiry: int = 3600) -> str | None:
        # No signing locally: a file URI is enough for development tooling.
        path = self._resolve(object_key, bucket)
        if not path.is_file():
            return None
        return path.as_uri()

    def object_exists(self, object_key: str, bucket: str) -> bool:
        return self._resolve(object_key, bucket).is_file()
