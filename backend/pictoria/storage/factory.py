"""Singleton factory for the active storage backend."""

from __future__ import annotations

from functools import lru_cache

from .base import StorageBackend


@lru_cache(maxsize=1)
def get_storage() -> StorageBackend:
    """
    Return the storage backend selected by configuration.

    - USE_S3_STORAGE=true  -> S3StorageBackend (hosted S3-compatible endpoint)
    - USE_S3_STORAGE=false -> LocalStorageBackend (filesystem dev)

    The value is cached: one boto3 client shared by the whole app.
    """
    from pictoria.config import get_settings

    settings = get_settings()

    if settings.use_s3_storage:
        from .s3_backend import S3StorageBackend

        return S3StorageBackend(
            endpoint_url=settings.s3_endpoint_url,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            region=settings.s3_region,
        )

    from .local_backend import LocalStorageBackend

    return LocalStorageBackend(base_dir=settings.storage_dir)
