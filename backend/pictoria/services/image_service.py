"""Image generation and gallery management."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from pictoria.clients.identity_client import UserProfile
from pictoria.clients.replicate_client import ReplicateClient
from pictoria.config import Settings
from pictoria.errors import NotFoundError, RequestValidationFailure, UpstreamError
from pictoria.metrics import get_metrics_collector
from pictoria.models.generated_image import GeneratedImage
from pictoria.schemas.image import GeneratedImage as GeneratedImageSchema
from pictoria.schemas.image import ImageGenerationRequest
from pictoria.services.training_service import TrainingService
from pictoria.storage.base import StorageBackend

logger = structlog.get_logger(__name__)

CONTENT_TYPES = {"jpg": "image/jpeg", "png": "image/png", "webp": "image/webp"}


class ImageService:
    """Runs predictions and keeps their outputs in the images bucket."""

    def __init__(self, settings: Settings, replicate: ReplicateClient, storage: StorageBackend) -> None:
        self.settings = settings
        self.replicate = replicate
        self.storage = storage

    def resolve_model(self, db: Session, user: UserProfile, request: ImageGenerationRequest) -> tuple[str, str]:
        """Return ``(provider model reference, prompt)`` for the request.

        Fine-tuned models run at their trained version with the trigger
        word prefixed to the prompt.
        """
        if request.uses_base_model:
            return request.model, request.prompt

        record = TrainingService.get_ready_model(db, user.id, request.model)
        if record is None:
            raise RequestValidationFailure("Model is not available for generation")
        reference = f"{self.settings.replicate_model_owner}/{record.model_id}:{record.version}"
        return reference, f"{record.trigger_word} {request.prompt}"

    def to_schema(self, image: GeneratedImage) -> GeneratedImageSchema:
        schema = GeneratedImageSchema.model_validate(image)
        schema.url = self.storage.get_presigned_url(
            image.image_name,
            self.settings.images_bucket,
            expiry=self.settings.signed_url_expiry,
        )
        return schema

    async def generate(self, db: Session, user: UserProfile, request: ImageGenerationRequest) -> list[GeneratedImageSchema]:
        reference, prompt = await run_in_threadpool(self.resolve_model, db, user, request)
        prediction = await self.replicate.create_prediction(reference, request.provider_input(prompt))
        if not prediction.output:
            raise UpstreamError("replicate.create_prediction", "Image generation returned no output")

        bucket = self.settings.images_bucket
        content_type = CONTENT_TYPES.get(request.output_format, "application/octet-stream")
        records: list[GeneratedImage] = []
        for output_url in prediction.output:
            data = await self.replicate.download(output_url)
            image_name = f"{user.id}/{uuid.uuid4().hex}.{request.output_format}"
            await run_in_threadpool(self.storage.upload_bytes, data, image_name, bucket, content_type=content_type)
            records.append(
                GeneratedImage(
                    user_id=user.id,
                    model=request.model,
                    prompt=request.prompt,
                    guidance=request.guidance,
                    num_inference_steps=request.num_inference_steps,
                    output_format=request.output_format,
                    output_quality=request.output_quality,
                    aspect_ratio=request.aspect_ratio,
                    image_name=image_name,
                )
            )

        schemas = await run_in_threadpool(self._save, db, records)

        model_kind = "base" if request.uses_base_model else "trained"
        get_metrics_collector().record_images(model_kind, len(records))

        logger.info("images.generated", user_id=user.id, model=request.model, count=len(records))
        return schemas

    def _save(self, db: Session, records: list[GeneratedImage]) -> list[GeneratedImageSchema]:
        try:
            db.add_all(records)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise UpstreamError("database.insert_images", f"Failed to save generated images: {exc}") from exc
        for record in records:
            db.refresh(record)
        return [self.to_schema(record) for record in records]

    def list_images(self, db: Session, user: UserProfile) -> list[GeneratedImageSchema]:
        images = db.scalars(
            select(GeneratedImage)
            .where(GeneratedImage.user_id == user.id)
            .order_by(GeneratedImage.created_at.desc())
        ).all()
        return [self.to_schema(image) for image in images]

    def delete_image(self, db: Session, user: UserProfile, image_id: str) -> None:
        image = db.scalar(
            select(GeneratedImage).where(GeneratedImage.id == image_id, GeneratedImage.user_id == user.id)
        )
        if image is None:
            raise NotFoundError("Image not found")

        image_name = image.image_name
        try:
            db.delete(image)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise UpstreamError("database.delete_image", f"Failed to delete image: {exc}") from exc

        self.storage.delete_object(image_name, self.settings.images_bucket)
        logger.info("images.deleted", user_id=user.id, image_id=image_id)
