"""Pydantic schemas for training submission and completion callbacks."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TrainingStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @classmethod
    def from_provider(cls, raw: str | None) -> "TrainingStatus":
        """Map a provider status onto the stored enum; ``starting`` is stored as queued."""
        value = (raw or "").strip().lower()
        if value in {"", "starting"}:
            return cls.QUEUED
        if value == "cancelled":
            return cls.CANCELED
        try:
            return cls(value)
        except ValueError:
            return cls.PROCESSING


class TrainingSubmission(BaseModel):
    """Form fields accepted by the submission endpoint."""

    model_config = ConfigDict(protected_namespaces=())

    file_key: str | None = Field(default=None, max_length=1024)
    model_name: str | None = Field(default=None, max_length=120)
    gender: str | None = Field(default=None, max_length=16)

    @property
    def is_complete(self) -> bool:
        return bool(self.file_key) and bool(self.model_name)


class WebhookMetrics(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_time: float | None = None


class WebhookOutput(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: str | None = None
    weights: str | None = None


class TrainingWebhookPayload(BaseModel):
    """Subset of the provider's training object delivered on completion."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    status: str
    metrics: WebhookMetrics | None = None
    output: WebhookOutput | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == TrainingStatus.SUCCEEDED.value

    @property
    def total_time(self) -> float | None:
        return self.metrics.total_time if self.metrics else None

    @property
    def version_id(self) -> str | None:
        """Version id after the first colon of ``output.version`` (``owner/model:id``)."""
        raw = self.output.version if self.output else None
        if not raw:
            return None
        parts = raw.split(":")
        if len(parts) < 2 or not parts[1]:
            return None
        return parts[1]


class TrainedModel(BaseModel):
    """Public model record schema."""

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    model_id: str
    user_id: str
    model_name: str
    gender: str | None = None
    trigger_word: str
    training_status: str
    training_steps: int
    training_id: str | None = None
    version: str | None = None
    training_time: float | None = Field(default=None, ge=0)
    created_at: datetime
