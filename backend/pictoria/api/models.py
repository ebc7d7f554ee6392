"""REST endpoint listing the caller's trained models."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pictoria.api.deps import get_db
from pictoria.auth.dependencies import require_user
from pictoria.clients.identity_client import UserProfile
from pictoria.schemas.training import TrainedModel
from pictoria.services.training_service import TrainingService

router = APIRouter()


@router.get("", response_model=list[TrainedModel])
def list_models(
    user: Annotated[UserProfile, Depends(require_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[TrainedModel]:
    """List the caller's models, newest first."""
    return [TrainedModel.model_validate(model) for model in TrainingService.list_models(db, user.id)]
