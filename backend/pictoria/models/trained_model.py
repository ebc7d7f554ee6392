"""SQLAlchemy model for fine-tuned model status tracking."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from pictoria.database import Base


class TrainedModel(Base):
    """One training submission and the provider-side state it reached."""

    __tablename__ = "models"

    model_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    model_name: Mapped[str] = mapped_column(String(120), nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    trigger_word: Mapped[str] = mapped_column(String(32), nullable=False)

    training_status: Mapped[str] = mapped_column(String(32), default="queued", nullable=False, index=True)
    training_steps: Mapped[int] = mapped_column(Integer, nullable=False)
    training_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)
    version: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    training_time: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
