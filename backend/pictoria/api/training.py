"""Endpoint starting a fine-tuning run for the caller."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from pictoria.api.deps import enforce_write_rate_limit, get_db, get_training_service
from pictoria.auth.dependencies import get_optional_user
from pictoria.clients.identity_client import UserProfile
from pictoria.errors import ErrorKind, PictoriaError, UpstreamError
from pictoria.metrics import get_metrics_collector
from pictoria.schemas.training import TrainingSubmission
from pictoria.services.training_service import TrainingService

logger = structlog.get_logger(__name__)

router = APIRouter()

DEFAULT_ERROR = "Failed to start the model training"


@router.post("/train", status_code=status.HTTP_201_CREATED, dependencies=[Depends(enforce_write_rate_limit)])
async def start_training(
    user: Annotated[UserProfile | None, Depends(get_optional_user)],
    service: Annotated[TrainingService, Depends(get_training_service)],
    db: Annotated[Session, Depends(get_db)],
    file_key: Annotated[str | None, Form(alias="fileKey")] = None,
    model_name: Annotated[str | None, Form(alias="modelName")] = None,
    gender: Annotated[str | None, Form()] = None,
) -> JSONResponse:
    """Upload reference -> provider training job + status row."""
    metrics = get_metrics_collector()
    if user is None:
        metrics.record_training(ErrorKind.UNAUTHORIZED.value)
        return JSONResponse({"error": "Unauthorised"}, status_code=status.HTTP_401_UNAUTHORIZED)

    logger.info("training.request", user_id=user.id, file_key=file_key, model_name=model_name, gender=gender)
    try:
        submission = TrainingSubmission(file_key=file_key, model_name=model_name, gender=gender)
    except ValidationError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        metrics.record_training(ErrorKind.VALIDATION.value)
        return JSONResponse(
            {"error": f"Invalid fields: {', '.join(fields)}"}, status_code=status.HTTP_400_BAD_REQUEST
        )
    if not submission.is_complete:
        metrics.record_training(ErrorKind.VALIDATION.value)
        return JSONResponse({"error": "Missing required fields"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        await service.submit(db, user, submission)
    except PictoriaError as exc:
        logger.error("training.failed", kind=exc.kind.value, retryable=exc.retryable, error=exc.message)
        metrics.record_training(exc.kind.value)
        if isinstance(exc, UpstreamError):
            metrics.record_upstream_error(exc.step, exc.retryable)
        return JSONResponse({"error": exc.message or DEFAULT_ERROR}, status_code=exc.status_code)
    except Exception as exc:
        logger.exception("training.failed", error=str(exc))
        metrics.record_training("error")
        return JSONResponse({"error": str(exc) or DEFAULT_ERROR}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    metrics.record_training("started")
    return JSONResponse({"success": True}, status_code=status.HTTP_201_CREATED)
