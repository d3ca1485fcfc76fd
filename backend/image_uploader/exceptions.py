"""
Image Uploader Backend - Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for the image lifecycle.
How:   Each exception carries a caller-safe message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       JSON error responses with the matching HTTP status code.
Who:   Raised by ImageService, the Media Host client and middleware.

Exception Hierarchy:
    ImageUploaderError (base)
    ├── ValidationError          → 400 Bad Request (missing payload, bad id)
    ├── NotFoundError            → 404 Not Found (unknown id, empty store)
    ├── PayloadTooLargeError     → 413 Payload Too Large
    └── UpstreamError            → 500 Internal Server Error
        ├── MediaHostError       (Cloudinary upload/destroy failed)
        └── RecordStoreError     (database lookup/write failed)

The `context` dict is logged server-side and never returned for upstream
errors; only `message` reaches the caller.
"""

from typing import Any, Dict, Optional


class ImageUploaderError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for validation errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ImageUploaderError):
    """
    Raised when caller-supplied input fails a local syntactic check.

    When:    Upload without image data, identifier that is not 24 hex chars.
    HTTP:    400 Bad Request. Raised before either dependency is contacted.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ImageUploaderError):
    """
    Raised when a referenced record does not exist, or the store is empty.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        message: str = "Image not Found",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class PayloadTooLargeError(ImageUploaderError):
    """
    Raised when a request body exceeds the configured size limit.

    HTTP:    413 Payload Too Large
    """

    def __init__(
        self,
        max_size: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        max_mb = max_size / (1024 * 1024)
        ctx = context or {}
        ctx["max_size"] = max_size
        super().__init__(
            message=f"Request body exceeds the maximum of {max_mb:.0f}MB.",
            context=ctx,
        )
        self.max_size = max_size


class UpstreamError(ImageUploaderError):
    """
    Raised when the Media Host or the Record Store fails.

    HTTP:    500 Internal Server Error, generic message. No retry is attempted.
    """

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MediaHostError(UpstreamError):
    """Cloudinary rejected or failed an upload/destroy call."""

    def __init__(
        self,
        message: str = "Media host request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RecordStoreError(UpstreamError):
    """A database lookup or write failed."""

    def __init__(
        self,
        message: str = "Record store request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
