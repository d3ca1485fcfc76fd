"""
Image Uploader Backend - Abstract Media Host Interface
=======================================================

What:  Contract for the external service that stores image binaries.
How:   Concrete hosts inherit from MediaHost and implement upload(),
       destroy() and health_check(). ImageService receives an instance at
       construction time and never touches SDK state directly.
Who:   Implemented by CloudinaryMediaHost; replaced by mocks in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedMedia:
    """
    Result of a successful upload.

    `url` and `media_id` come from the same host response and are stored
    together on the ImageRecord.
    """
    url: str
    media_id: str


class MediaHost(ABC):
    """
    Abstract interface for a media hosting provider.

    Contract:
        - Every provider failure is raised as MediaHostError
        - No retries; a failed call fails the request
        - Calls must not block the event loop
    """

    @abstractmethod
    async def upload(self, data: str) -> UploadedMedia:
        """
        Store an encoded image payload.

        Args:
            data: Encoded payload exactly as received from the caller (for
                  example a base64 data URI). Format checks are left to the
                  host.

        Returns:
            UploadedMedia with the public URL and the host identifier.

        Raises:
            MediaHostError: The host rejected the payload or was unreachable.
        """
        ...

    @abstractmethod
    async def destroy(self, media_id: str) -> None:
        """
        Delete the binary identified by `media_id`.

        Raises:
            MediaHostError: The host could not be reached or refused the call.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the host is reachable with the configured credentials."""
        ...
