"""REST endpoints for image generation and the gallery."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pictoria.api.deps import enforce_write_rate_limit, get_db, get_image_service
from pictoria.auth.dependencies import require_user
from pictoria.clients.identity_client import UserProfile
from pictoria.schemas.image import GeneratedImage, ImageGenerationRequest, ImageGenerationResponse
from pictoria.services.image_service import ImageService

router = APIRouter()


@router.post(
    "/generate",
    response_model=ImageGenerationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_write_rate_limit)],
)
async def generate_images(
    payload: ImageGenerationRequest,
    user: Annotated[UserProfile, Depends(require_user)],
    service: Annotated[ImageService, Depends(get_image_service)],
    db: Annotated[Session, Depends(get_db)],
) -> ImageGenerationResponse:
    """Run a prediction and store its outputs in the caller's gallery."""
    images = await service.generate(db, user, payload)
    return ImageGenerationResponse(success=True, images=images)


@router.get("", response_model=list[GeneratedImage])
def list_images(
    user: Annotated[UserProfile, Depends(require_user)],
    service: Annotated[ImageService, Depends(get_image_service)],
    db: Annotated[Session, Depends(get_db)],
) -> list[GeneratedImage]:
    return service.list_images(db, user)


@router.delete("/{image_id}", dependencies=[Depends(enforce_write_rate_limit)])
def delete_image(
    image_id: str,
    user: Annotated[UserProfile, Depends(require_user)],
    service: Annotated[ImageService, Depends(get_image_service)],
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, bool]:
    """Delete one image row and its stored file."""
    service.delete_image(db, user, image_id)
    return {"success": True}
