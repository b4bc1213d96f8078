"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from fieldcam.adapters.auth_client import HttpxAuthClient
from fieldcam.adapters.file_user_store import FileUserStore
from fieldcam.adapters.filesystem_media_store import FilesystemMediaStore
from fieldcam.config import Settings
from fieldcam.services.auth import AuthService
from fieldcam.services.camera import CameraHardware, CameraService
from fieldcam.services.location import LocationProvider, LocationService
from fieldcam.services.media import MediaPicker, MediaService, MediaStore
from fieldcam.services.permissions import PermissionGateway, PermissionService
from fieldcam.services.resources import ExclusiveResources


@dataclass
class DevicePlatform:
    """Device subsystems supplied by the host platform."""

    permissions: PermissionGateway
    camera: CameraHardware
    location: LocationProvider
    picker: MediaPicker
    media_store: MediaStore | None = None


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    resources: ExclusiveResources
    permission_service: PermissionService
    camera_service: CameraService
    location_service: LocationService
    media_service: MediaService
    auth_service: AuthService
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    platform: DevicePlatform, settings: Settings | None = None
) -> AppContainer:
    """Create the default dependency container for a device platform."""
    resolved_settings = settings or Settings()
    resources = ExclusiveResources()
    permission_service = PermissionService(platform.permissions)
    camera_service = CameraService(
        hardware=platform.camera,
        permission_service=permission_service,
        resources=resources,
        default_facing=resolved_settings.camera_default_facing,
        quality=resolved_settings.camera_capture_quality,
        ready_timeout_seconds=resolved_settings.camera_ready_timeout_seconds,
    )
    location_service = LocationService(
        provider=platform.location,
        permission_service=permission_service,
        resources=resources,
        accuracy=resolved_settings.location_accuracy,
        fix_timeout_seconds=resolved_settings.location_fix_timeout_seconds,
        time_interval_ms=resolved_settings.location_watch_interval_ms,
        distance_interval_m=resolved_settings.location_watch_distance_m,
    )
    media_store = platform.media_store or FilesystemMediaStore(
        Path(resolved_settings.media_root)
    )
    media_service = MediaService(
        store=media_store,
        picker=platform.picker,
        permission_service=permission_service,
        album_name=resolved_settings.gallery_album_name,
        quality=resolved_settings.camera_capture_quality,
    )
    auth_client = HttpxAuthClient.create(
        resolved_settings.auth_api_base_url,
        timeout_seconds=resolved_settings.auth_timeout_seconds,
    )
    auth_service = AuthService(
        client=auth_client,
        user_store=FileUserStore(Path(resolved_settings.user_store_path)),
    )

    async def close_resources() -> None:
        await auth_client.close()

    return AppContainer(
        settings=resolved_settings,
        resources=resources,
        permission_service=permission_service,
        camera_service=camera_service,
        location_service=location_service,
        media_service=media_service,
        auth_service=auth_service,
        close_resources=close_resources,
    )
