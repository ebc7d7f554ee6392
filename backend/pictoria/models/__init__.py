"""SQLAlchemy model exports."""

from __future__ import annotations

from pictoria.models.generated_image import GeneratedImage
from pictoria.models.trained_model import TrainedModel

__all__ = ["TrainedModel", "GeneratedImage"]
