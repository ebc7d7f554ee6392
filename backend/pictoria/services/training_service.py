"""Submission of fine-tuning runs to the hosted trainer."""

from __future__ import annotations

import time
from urllib.parse import urlencode

import structlog
from sqlalchemy import select
from starlette.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pictoria.clients.identity_client import UserProfile
from pictoria.clients.replicate_client import ReplicateClient
from pictoria.config import Settings
from pictoria.errors import ConfigurationError, RequestValidationFailure, UpstreamError
from pictoria.models.trained_model import TrainedModel
from pictoria.schemas.training import TrainingStatus, TrainingSubmission
from pictoria.storage.base import StorageBackend, strip_bucket_prefix

logger = structlog.get_logger(__name__)

WEBHOOK_PATH = "/webhooks/training"


def normalize_model_name(model_name: str) -> str:
    return model_name.lower().replace(" ", "_")


def _now_ms() -> int:
    return int(time.time() * 1000)


def build_model_id(user_id: str, model_name: str, timestamp_ms: int | None = None) -> str:
    """``{user_id}_{timestamp_ms}_{normalized name}``; unique per caller and millisecond."""
    if timestamp_ms is None:
        timestamp_ms = _now_ms()
    return f"{user_id}_{timestamp_ms}_{normalize_model_name(model_name)}"


class TrainingService:
    """Starts provider trainings and records them as model rows."""

    def __init__(self, settings: Settings, replicate: ReplicateClient, storage: StorageBackend) -> None:
        self.settings = settings
        self.replicate = replicate
        self.storage = storage

    def callback_url(self, user_id: str, model_name: str, file_name: str) -> str:
        base = self.settings.webhook_base_url
        if not base:
            raise ConfigurationError("SITE_URL or NGROK_HOST must be set to receive training webhooks")
        query = urlencode({"userId": user_id, "modelName": model_name, "fileName": file_name})
        return f"{base}{self.settings.api_prefix}{WEBHOOK_PATH}?{query}"

    def training_input(self, dataset_url: str) -> dict:
        return {
            "steps": self.settings.training_steps,
            "resolution": self.settings.training_resolution,
            "input_images": dataset_url,
            "trigger_word": self.settings.trigger_word,
        }

    async def submit(self, db: Session, user: UserProfile, submission: TrainingSubmission) -> TrainedModel:
        """Create the destination model, start the training, and insert its status row.

        Nothing is rolled back on partial failure: a model created on the
        provider stays there if the training call fails afterwards.
        """
        if not submission.is_complete:
            raise RequestValidationFailure("Missing required fields")
        if not self.settings.replicate_api_token:
            raise ConfigurationError("The replicate API Token is not set")

        bucket = self.settings.training_bucket
        file_name = strip_bucket_prefix(submission.file_key, bucket)
        dataset_url = await run_in_threadpool(
            self.storage.get_presigned_url, file_name, bucket, expiry=self.settings.signed_url_expiry
        )
        if not dataset_url:
            raise UpstreamError("storage.signed_url", "Failed to get the file Url")

        model_id = build_model_id(user.id, submission.model_name)
        owner = self.settings.replicate_model_owner
        webhook = self.callback_url(user.id, submission.model_name, file_name)

        await self.replicate.create_model(
            owner,
            model_id,
            visibility="private",
            hardware=self.settings.replicate_model_hardware,
        )
        training = await self.replicate.create_training(
            self.settings.training_base_owner,
            self.settings.training_base_model,
            self.settings.training_base_version,
            destination=f"{owner}/{model_id}",
            input=self.training_input(dataset_url),
            webhook=webhook,
            webhook_events_filter=["completed"],
        )

        record = TrainedModel(
            model_id=model_id,
            user_id=user.id,
            model_name=submission.model_name,
            gender=submission.gender,
            training_status=TrainingStatus.from_provider(training.status).value,
            trigger_word=self.settings.trigger_word,
            training_steps=self.settings.training_steps,
            training_id=training.id,
        )
        await run_in_threadpool(self._insert, db, record)

        logger.info("training.submitted", model_id=model_id, training_id=training.id, user_id=user.id)
        return record

    @staticmethod
    def _insert(db: Session, record: TrainedModel) -> None:
        model_id = record.model_id
        try:
            db.add(record)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise UpstreamError("database.insert_model", f"Failed to save model {model_id}: {exc}") from exc
        db.refresh(record)

    @staticmethod
    def list_models(db: Session, user_id: str) -> list[TrainedModel]:
        """Return the caller's model rows, newest first."""
        return list(
            db.scalars(
                select(TrainedModel)
                .where(TrainedModel.user_id == user_id)
                .order_by(TrainedModel.created_at.desc())
            ).all()
        )

    @staticmethod
    def get_ready_model(db: Session, user_id: str, model_id: str) -> TrainedModel | None:
        """Return the caller's model if training succeeded and a version exists."""
        return db.scalar(
            select(TrainedModel).where(
                TrainedModel.user_id == user_id,
                TrainedModel.model_id == model_id,
                TrainedModel.training_status == TrainingStatus.SUCCEEDED.value,
                TrainedModel.version.is_not(None),
            )
        )
