"""Pydantic schema exports for API contracts."""

from __future__ import annotations

from pictoria.schemas.image import GeneratedImage, ImageGenerationRequest, ImageGenerationResponse
from pictoria.schemas.training import (
    TrainedModel,
    TrainingStatus,
    TrainingSubmission,
    TrainingWebhookPayload,
)

__all__ = [
    "TrainingStatus",
    "TrainingSubmission",
    "TrainingWebhookPayload",
    "TrainedModel",
    "ImageGenerationRequest",
    "ImageGenerationResponse",
    "GeneratedImage",
]
