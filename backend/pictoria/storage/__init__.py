"""Storage backends for Pictoria: local filesystem (dev) and S3-compatible buckets (prod)."""

from .base import StorageBackend
from .factory import get_storage

__all__ = ["StorageBackend", "get_storage"]
