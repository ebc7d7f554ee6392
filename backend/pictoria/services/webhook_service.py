"""Handling of training completion callbacks."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from pictoria.clients.identity_client import IdentityClient, UserProfile
from pictoria.clients.replicate_client import ReplicateClient
from pictoria.config import Settings
from pictoria.errors import AuthenticationError, SignatureMismatch, UpstreamError
from pictoria.models.trained_model import TrainedModel
from pictoria.schemas.training import TrainingWebhookPayload
from pictoria.services.notification_service import NotificationService
from pictoria.services.webhook_signature import verify_signature
from pictoria.storage.base import StorageBackend, strip_bucket_prefix

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WebhookDelivery:
    """One inbound callback: raw body, routing query params and signature headers."""

    body: bytes
    user_id: str
    model_name: str
    file_name: str
    webhook_id: str
    timestamp: str
    signature: str


class TrainingWebhookService:
    def __init__(
        self,
        settings: Settings,
        replicate: ReplicateClient,
        identity: IdentityClient,
        notifications: NotificationService,
        storage: StorageBackend,
    ) -> None:
        self.settings = settings
        self.replicate = replicate
        self.identity = identity
        self.notifications = notifications
        self.storage = storage

    async def signing_secret(self) -> str:
        if self.settings.replicate_webhook_secret:
            return self.settings.replicate_webhook_secret
        return await self.replicate.get_webhook_secret()

    async def authenticate(self, delivery: WebhookDelivery) -> None:
        secret = await self.signing_secret()
        if not verify_signature(secret, delivery.webhook_id, delivery.timestamp, delivery.body, delivery.signature):
            logger.warning("webhook.signature_rejected", webhook_id=delivery.webhook_id)
            raise SignatureMismatch("Invalid signature")

    async def handle(self, db: Session, delivery: WebhookDelivery) -> TrainingWebhookPayload:
        """Verify, notify, record the outcome, then drop the dataset.

        The dataset is deleted exactly once per authenticated delivery, even
        when a step after authentication fails.
        """
        await self.authenticate(delivery)

        user = await self.identity.get_user_by_id(delivery.user_id)
        if user is None:
            raise AuthenticationError("User not found")

        try:
            payload = TrainingWebhookPayload.model_validate_json(delivery.body)
            if payload.succeeded:
                await self.notifications.training_succeeded(user)
            else:
                await self.notifications.training_ended(user, payload.status)
            await run_in_threadpool(self.record_outcome, db, user, delivery.model_name, payload)
        finally:
            await run_in_threadpool(self.delete_dataset, delivery.file_name)

        logger.info(
            "webhook.processed",
            user_id=user.id,
            model_name=delivery.model_name,
            status=payload.status,
        )
        return payload

    @staticmethod
    def record_outcome(db: Session, user: UserProfile, model_name: str, payload: TrainingWebhookPayload) -> int:
        """Blind update of the matching row; returns the number of rows changed.

        Rows match on owner and model name, narrowed to the provider job id
        when the callback carries one.
        """
        values: dict[str, object] = {"training_status": payload.status}
        if payload.succeeded:
            values["training_time"] = payload.total_time
            values["version"] = payload.version_id

        stmt = update(TrainedModel).where(
            TrainedModel.user_id == user.id,
            TrainedModel.model_name == model_name,
        )
        if payload.id:
            stmt = stmt.where(TrainedModel.training_id == payload.id)

        try:
            result = db.execute(stmt.values(**values))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise UpstreamError("database.update_model", f"Failed to update model {model_name}: {exc}") from exc

        if result.rowcount == 0:
            logger.warning("webhook.no_matching_model", user_id=user.id, model_name=model_name, training_id=payload.id)
        return result.rowcount

    def delete_dataset(self, file_name: str) -> None:
        bucket = self.settings.training_bucket
        object_key = strip_bucket_prefix(file_name, bucket)
        if not object_key:
            logger.warning("webhook.dataset_key_missing")
            return
        self.storage.delete_object(object_key, bucket)
        logger.info("webhook.dataset_deleted", key=object_key, bucket=bucket)
