"""Callback endpoint the training provider hits when a run completes."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from pictoria.api.deps import get_db, get_webhook_service
from pictoria.errors import AuthenticationError, SignatureMismatch, UpstreamError
from pictoria.metrics import get_metrics_collector
from pictoria.services.webhook_service import TrainingWebhookService, WebhookDelivery

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/webhooks/training", response_class=PlainTextResponse)
async def training_webhook(
    request: Request,
    service: Annotated[TrainingWebhookService, Depends(get_webhook_service)],
    db: Annotated[Session, Depends(get_db)],
    user_id: Annotated[str, Query(alias="userId")] = "",
    model_name: Annotated[str, Query(alias="modelName")] = "",
    file_name: Annotated[str, Query(alias="fileName")] = "",
) -> PlainTextResponse:
    """Plain-text responses only: the caller is the provider, which retries on non-2xx."""
    metrics = get_metrics_collector()
    try:
        delivery = WebhookDelivery(
            body=await request.body(),
            user_id=user_id,
            model_name=model_name,
            file_name=file_name,
            webhook_id=request.headers.get("webhook-id", ""),
            timestamp=request.headers.get("webhook-timestamp", ""),
            signature=request.headers.get("webhook-signature", ""),
        )
        payload = await service.handle(db, delivery)
    except SignatureMismatch:
        metrics.record_webhook("invalid_signature")
        return PlainTextResponse("Invalid signature", status_code=status.HTTP_401_UNAUTHORIZED)
    except AuthenticationError:
        metrics.record_webhook("unknown_user")
        return PlainTextResponse("User not found", status_code=status.HTTP_401_UNAUTHORIZED)
    except Exception as exc:
        logger.exception("webhook.failed", user_id=user_id, model_name=model_name, error=str(exc))
        metrics.record_webhook("error")
        if isinstance(exc, UpstreamError):
            metrics.record_upstream_error(exc.step, exc.retryable)
        return PlainTextResponse("Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    metrics.record_webhook(payload.status)
    return PlainTextResponse("OK", status_code=status.HTTP_200_OK)
