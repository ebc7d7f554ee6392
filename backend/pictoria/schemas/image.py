"""Pydantic schemas for image generation and the gallery."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BASE_MODELS = ("black-forest-labs/flux-dev", "black-forest-labs/flux-schnell")

AspectRatio = Literal["1:1", "16:9", "21:9", "3:2", "2:3", "4:5", "5:4", "3:4", "4:3", "9:16", "9:21"]
OutputFormat = Literal["webp", "jpg", "png"]


class ImageGenerationRequest(BaseModel):
    """Inference settings collected by the generation form."""

    model: str = Field(default=BASE_MODELS[0], min_length=1, max_length=255)
    prompt: str = Field(..., min_length=1, max_length=2000)
    guidance: float = Field(default=3.5, ge=0, le=10)
    num_outputs: int = Field(default=1, ge=1, le=4)
    aspect_ratio: AspectRatio = "1:1"
    output_format: OutputFormat = "jpg"
    output_quality: int = Field(default=80, ge=1, le=100)
    num_inference_steps: int = Field(default=28, ge=1, le=50)

    @property
    def uses_base_model(self) -> bool:
        return self.model in BASE_MODELS

    def provider_input(self, prompt: str | None = None) -> dict:
        """Input payload for the provider's flux predictors."""
        return {
            "prompt": prompt if prompt is not None else self.prompt,
            "guidance": self.guidance,
            "num_outputs": self.num_outputs,
            "aspect_ratio": self.aspect_ratio,
            "output_format": self.output_format,
            "output_quality": self.output_quality,
            "num_inference_steps": self.num_inference_steps,
        }


class GeneratedImage(BaseModel):
    """Stored image with a short-lived download URL."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    model: str
    prompt: str
    guidance: float
    num_inference_steps: int
    output_format: str
    output_quality: int
    aspect_ratio: str
    image_name: str
    url: str | None = None
    created_at: datetime | None = None


class ImageGenerationResponse(BaseModel):
    success: bool = True
    images: list[GeneratedImage] = Field(default_factory=list)
