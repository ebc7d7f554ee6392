"""Aggregate API router for all endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from pictoria.api import images, models, training, webhooks

api_router = APIRouter()
api_router.include_router(training.router, tags=["training"])
api_router.include_router(webhooks.router, tags=["webhooks"])
api_router.include_router(models.router, prefix="/models", tags=["models"])
api_router.include_router(images.router, prefix="/images", tags=["images"])
