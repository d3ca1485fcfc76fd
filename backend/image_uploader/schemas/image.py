"""
Image Uploader Backend - Pydantic Request/Response Schemas
===========================================================

What:  Pydantic models defining the JSON contract of the image API.
How:   FastAPI validates request bodies against these models, serialises
       responses through them and builds the OpenAPI document from them.

Wire names:
    Records are exposed as {"id", "title", "imageUrl", "mediaId"}. The
    Python attributes stay snake_case; aliases carry the wire names, and
    FastAPI serialises response models by alias.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ImageUploadRequest(BaseModel):
    """
    Body of POST /api/upload.

    `image` is optional at the schema level so that a missing payload is
    reported by ImageService as a 400 with the API's own message, rather than
    as FastAPI's generic 422.
    """
    image: Optional[str] = Field(
        default=None,
        description="Encoded image payload, e.g. a data URI 'data:image/jpeg;base64,...'",
    )
    title: Optional[str] = Field(default=None, description="Optional display title")


class ImageUpdateRequest(BaseModel):
    """Body of PUT /api/image/{id}. Omitted `title` clears the title."""
    image: Optional[str] = Field(
        default=None,
        description="Replacement image payload; omit to keep the current image",
    )
    title: Optional[str] = Field(default=None, description="New display title")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ImageRecordResponse(BaseModel):
    """One stored image record."""
    id: str = Field(description="24-hex record identifier")
    title: Optional[str] = Field(default=None, description="Display title")
    image_url: str = Field(
        validation_alias=AliasChoices("image_url", "imageUrl"),
        serialization_alias="imageUrl",
        description="Public URL of the image",
    )
    media_id: str = Field(
        validation_alias=AliasChoices("media_id", "mediaId"),
        serialization_alias="mediaId",
        description="Media Host identifier",
    )

    model_config = ConfigDict(from_attributes=True)


class ImageResultResponse(BaseModel):
    """Upload/update result: message plus the persisted record."""
    message: str = Field(description="Human-readable success message")
    data: ImageRecordResponse = Field(description="The persisted image record")


class MessageResponse(BaseModel):
    """Plain acknowledgement, returned by delete."""
    message: str


ImageListResponse = List[ImageRecordResponse]


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {
            "error": "validation_error",
            "message": "Invalid image ID format",
            "details": {"field": "id"},
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service and dependency status, returned by GET /health."""
    status: str = Field(description="Overall status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Record store: connected, disconnected")
    media_host: str = Field(description="Media host: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
