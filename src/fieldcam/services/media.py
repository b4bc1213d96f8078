"""Saving photos to the media library and picking from the gallery."""

import errno
import logging
from dataclasses import dataclass
from typing import Protocol

from fieldcam.domain.capture import Photo
from fieldcam.domain.permissions import CapabilityKind
from fieldcam.errors import PermissionDenied, SaveError, SaveErrorKind
from fieldcam.services.permissions import PermissionService

_logger = logging.getLogger(__name__)


class MediaStore(Protocol):
    """Interface for the device media library."""

    async def create_asset(self, uri: str) -> str:
        """Import a file into the library and return the asset id."""

    async def create_or_append_album(self, name: str, asset_id: str) -> None:
        """Add an asset to the named album, creating it when missing."""


class MediaPicker(Protocol):
    """Interface for the system image picker."""

    async def pick_image(
        self, *, allows_editing: bool, aspect: tuple[int, int], quality: float
    ) -> Photo | None:
        """Let the user pick an image; None when the picker is cancelled."""


@dataclass
class MediaService:
    """Persist captured photos and pick existing ones."""

    store: MediaStore
    picker: MediaPicker
    permission_service: PermissionService
    album_name: str = "MyAppCamera"
    quality: float = 0.8

    async def save(self, photo: Photo, album_name: str | None = None) -> str:
        """Save a photo to an album and return the asset id.

        Failures are raised as SaveError without retrying.
        """
        album = album_name or self.album_name
        try:
            await self.permission_service.ensure_granted(CapabilityKind.MEDIA_LIBRARY)
        except PermissionDenied as error:
            raise SaveError(
                SaveErrorKind.PERMISSION_MISSING,
                "Gallery access is required to save photos",
            ) from error

        try:
            asset_id = await self.store.create_asset(photo.uri)
            await self.store.create_or_append_album(album, asset_id)
        except Exception as error:
            kind = _classify_store_error(error)
            _logger.warning("Saving %s to %s failed: %s", photo.uri, album, kind)
            raise SaveError(kind, str(error)) from error
        _logger.info("Image saved to album %s", album)
        return asset_id

    async def pick_from_gallery(self) -> Photo | None:
        """Open the image picker with editing and a 4:3 crop."""
        return await self.picker.pick_image(
            allows_editing=True, aspect=(4, 3), quality=self.quality
        )


def _classify_store_error(error: Exception) -> SaveErrorKind:
    if isinstance(error, PermissionError):
        return SaveErrorKind.PERMISSION_MISSING
    if isinstance(error, OSError) and error.errno == errno.ENOSPC:
        return SaveErrorKind.INSUFFICIENT_STORAGE
    return SaveErrorKind.UNKNOWN
