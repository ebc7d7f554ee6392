"""Reusable dependency providers for API routes."""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from collections.abc import Generator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from pictoria.clients.email_client import EmailClient
from pictoria.clients.identity_client import IdentityClient
from pictoria.clients.replicate_client import ReplicateClient
from pictoria.config import Settings, get_settings
from pictoria.database import SessionLocal
from pictoria.services.image_service import ImageService
from pictoria.services.notification_service import NotificationService
from pictoria.services.training_service import TrainingService
from pictoria.services.webhook_service import TrainingWebhookService
from pictoria.storage import StorageBackend, get_storage


class SimpleRateLimiter:
    """In-memory fixed-window rate limiter keyed by IP and endpoint."""

    def __init__(self) -> None:
        self._store: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def check(self, key: str, limit_per_minute: int) -> None:
        """Raise if requests exceed configured per-minute threshold."""
        now = time.time()
        cutoff = now - 60
        with self._lock:
            window = [ts for ts in self._store[key] if ts >= cutoff]
            if len(window) >= limit_per_minute:
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail="Rate limit exceeded",
                )
            window.append(now)
            self._store[key] = window

    def reset(self) -> None:
        with self._lock:
            self._store.clear()


rate_limiter = SimpleRateLimiter()


def get_db() -> Generator[Session, None, None]:
    """Yield database session and close safely."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_app_settings() -> Settings:
    """Expose settings dependency for routes/services."""
    return get_settings()


def _request_host(request: Request) -> str:
    """Resolve best-effort request host for per-client controls."""
    return request.client.host if request.client else "unknown"


def enforce_write_rate_limit(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Apply per-IP limits on mutating endpoints."""
    host = _request_host(request)
    key = f"{host}:{request.url.path}:write"
    rate_limiter.check(key=key, limit_per_minute=settings.write_rate_limit_per_minute)


# Provider clients live on app.state for the lifetime of the app; tests
# replace these providers through app.dependency_overrides.


def get_replicate_client(request: Request) -> ReplicateClient:
    return request.app.state.replicate


def get_identity_client(request: Request) -> IdentityClient:
    return request.app.state.identity


def get_email_client(request: Request) -> EmailClient:
    return request.app.state.email


def get_storage_backend() -> StorageBackend:
    return get_storage()


def get_training_service(
    settings: Settings = Depends(get_app_settings),
    replicate: ReplicateClient = Depends(get_replicate_client),
    storage: StorageBackend = Depends(get_storage_backend),
) -> TrainingService:
    return TrainingService(settings, replicate, storage)


def get_webhook_service(
    settings: Settings = Depends(get_app_settings),
    replicate: ReplicateClient = Depends(get_replicate_client),
    identity: IdentityClient = Depends(get_identity_client),
    email: EmailClient = Depends(get_email_client),
    storage: StorageBackend = Depends(get_storage_backend),
) -> TrainingWebhookService:
    return TrainingWebhookService(settings, replicate, identity, NotificationService(email), storage)


def get_image_service(
    settings: Settings = Depends(get_app_settings),
    replicate: ReplicateClient = Depends(get_replicate_client),
    storage: StorageBackend = Depends(get_storage_backend),
) -> ImageService:
    return ImageService(settings, replicate, storage)
