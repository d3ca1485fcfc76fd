"""
Image Uploader Backend - Image Route Handlers
==============================================

What:  The four image endpoints under /api.
How:   Each handler builds an ImageService around the app's Media Host
       client (via get_image_service), delegates, and wraps the result in
       the response schema. ValidationError / NotFoundError / UpstreamError
       raised by the service become 400 / 404 / 500 in main.py.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from image_uploader.database import get_db_session
from image_uploader.schemas.image import (
    ErrorResponse,
    ImageListResponse,
    ImageRecordResponse,
    ImageResultResponse,
    ImageUpdateRequest,
    ImageUploadRequest,
    MessageResponse,
)
from image_uploader.services.image_service import ImageService
from image_uploader.services.media_base import MediaHost

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["images"])


def get_media_host(request: Request) -> MediaHost:
    """The Media Host client created for this app in create_app()."""
    return request.app.state.media_host


def get_image_service(media_host: MediaHost = Depends(get_media_host)) -> ImageService:
    return ImageService(media_host=media_host)


@router.post(
    "/upload",
    response_model=ImageResultResponse,
    responses={
        200: {"description": "Image was successfully uploaded"},
        400: {"description": "Image was not provided", "model": ErrorResponse},
        413: {"description": "Request body too large", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Upload a new image",
)
async def upload_image(
    payload: Optional[ImageUploadRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    service: ImageService = Depends(get_image_service),
) -> ImageResultResponse:
    """Send the encoded image to the media host and store its record."""
    payload = payload or ImageUploadRequest()
    record = await service.upload(db, image=payload.image, title=payload.title)
    return ImageResultResponse(
        message="Image successfully uploaded",
        data=ImageRecordResponse.model_validate(record),
    )


@router.get(
    "/allImages",
    response_model=ImageListResponse,
    responses={
        200: {"description": "A list of all images"},
        404: {"description": "No image found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get all images",
)
async def list_images(
    db: AsyncSession = Depends(get_db_session),
    service: ImageService = Depends(get_image_service),
) -> List[ImageRecordResponse]:
    """
    Every stored record, oldest first.

    An empty store answers 404 rather than an empty array; existing
    clients branch on that status.
    """
    records = await service.list_all(db)
    return [ImageRecordResponse.model_validate(record) for record in records]


@router.delete(
    "/image/{image_id}",
    response_model=MessageResponse,
    responses={
        200: {"description": "Deleted image successfully"},
        400: {"description": "Invalid image ID format", "model": ErrorResponse},
        404: {"description": "Image not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete an image by ID",
)
async def delete_image(
    image_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: ImageService = Depends(get_image_service),
) -> MessageResponse:
    await service.delete(db, image_id)
    return MessageResponse(message="Deleted Image Successfully")


@router.put(
    "/image/{image_id}",
    response_model=ImageResultResponse,
    responses={
        200: {"description": "Image was successfully updated"},
        400: {"description": "Invalid image ID format", "model": ErrorResponse},
        404: {"description": "Image not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update an existing image",
)
async def update_image(
    image_id: str,
    payload: Optional[ImageUpdateRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    service: ImageService = Depends(get_image_service),
) -> ImageResultResponse:
    """
    Replace the title, and the image when one is supplied.

    The title is overwritten even when omitted from the body.
    """
    payload = payload or ImageUpdateRequest()
    record = await service.update(db, image_id, image=payload.image, title=payload.title)
    return ImageResultResponse(
        message="Image successfully updated",
        data=ImageRecordResponse.model_validate(record),
    )
