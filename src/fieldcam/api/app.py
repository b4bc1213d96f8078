"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from fieldcam.api.auth import router as auth_router
from fieldcam.api.models import CameraOpenBody, SaveBody, WatchBody
from fieldcam.app_logging import configure_logging
from fieldcam.containers import AppContainer
from fieldcam.domain.capture import Photo
from fieldcam.domain.location import LocationFix, describe_fix
from fieldcam.domain.permissions import CapabilityKind
from fieldcam.errors import (
    AuthRejected,
    CapabilityTimeout,
    FieldcamError,
    HardwareUnavailable,
    InvalidCredentialsInput,
    InvalidSessionState,
    NetworkError,
    PermissionDenied,
    ResourceBusy,
    SaveError,
    SaveErrorKind,
)
from fieldcam.services.camera import CameraSession
from fieldcam.services.location import LocationSession
from fieldcam.services.notices import notice_for


@dataclass
class ScreenState:
    """Sessions and the current photo owned by this app instance."""

    camera: CameraSession
    location: LocationSession
    photo: Photo | None = None

    async def release(self) -> None:
        await self.camera.close()
        await self.location.close()


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    screens = ScreenState(
        camera=container.camera_service.session(),
        location=container.location_service.session(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await app.state.screens.release()
            await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.screens = screens

    app.include_router(auth_router)

    @app.exception_handler(FieldcamError)
    async def render_error(request: Request, error: FieldcamError) -> JSONResponse:
        status_code = _status_for(error)
        if status_code >= 500:
            logger.warning(
                "%s on %s: %s", type(error).__name__, request.url.path, error
            )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(error).__name__, **asdict(notice_for(error))},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/permissions/{kind}")
    async def permission_status(kind: CapabilityKind) -> dict[str, str]:
        """Read a permission status without prompting."""
        status = await container.permission_service.current_status(kind)
        return {"kind": kind.value, "status": status.value}

    @app.post("/permissions/{kind}")
    async def request_permission(kind: CapabilityKind) -> dict[str, str]:
        """Ask the OS for a permission, prompting when needed."""
        status = await container.permission_service.request_capability(kind)
        return {"kind": kind.value, "status": status.value}

    @app.post("/camera/open")
    async def open_camera(body: CameraOpenBody | None = None) -> dict[str, str]:
        """Open the camera preview."""
        await screens.camera.open(body.facing if body else None)
        return _camera_state(screens.camera)

    @app.post("/camera/capture")
    async def capture_photo() -> dict[str, object]:
        """Take a picture from the open preview."""
        screens.photo = await screens.camera.capture()
        return {"photo": asdict(screens.photo)}

    @app.post("/camera/switch")
    async def switch_camera() -> dict[str, str]:
        """Flip between the front and back lens."""
        await screens.camera.switch_facing()
        return _camera_state(screens.camera)

    @app.post("/camera/close")
    async def close_camera() -> dict[str, str]:
        """Release the camera."""
        await screens.camera.close()
        return _camera_state(screens.camera)

    @app.get("/camera")
    async def camera_state() -> dict[str, object]:
        """Return the camera state and the current photo."""
        photo = asdict(screens.photo) if screens.photo else None
        return {**_camera_state(screens.camera), "photo": photo}

    @app.delete("/camera/photo")
    async def discard_photo() -> dict[str, str]:
        """Drop the current photo and go back to the preview."""
        screens.photo = None
        return {"status": "ok"}

    @app.post("/gallery/pick")
    async def pick_photo() -> dict[str, object]:
        """Pick a photo from the gallery as the current photo."""
        picked = await container.media_service.pick_from_gallery()
        if picked is not None:
            screens.photo = picked
        return {"photo": asdict(picked) if picked else None}

    @app.post("/gallery/save")
    async def save_photo(body: SaveBody | None = None) -> dict[str, str]:
        """Save the current photo to the gallery album."""
        if screens.photo is None:
            raise HTTPException(status_code=400, detail="No photo to save")
        album = body.album_name if body else None
        asset_id = await container.media_service.save(screens.photo, album)
        return {"status": "saved", "asset_id": asset_id}

    @app.get("/location/fix")
    async def current_location() -> dict[str, object]:
        """Return a fresh location fix."""
        fix = await screens.location.get_fix()
        return _fix_payload(fix)

    @app.post("/location/watch")
    async def start_watch(body: WatchBody | None = None) -> dict[str, object]:
        """Start tracking the position, replacing any active watch."""

        def on_fix(fix: LocationFix) -> None:
            logger.debug("Updated location: %s", fix)

        options = body or WatchBody()
        await screens.location.watch(
            on_fix,
            time_interval_ms=options.time_interval_ms,
            distance_interval_m=options.distance_interval_m,
        )
        return {"tracking": screens.location.active}

    @app.delete("/location/watch")
    async def stop_watch() -> dict[str, object]:
        """Stop tracking the position."""
        screens.location.stop()
        return {"tracking": screens.location.active}

    @app.get("/location/latest")
    async def latest_location() -> dict[str, object]:
        """Return the most recent fix seen by this screen."""
        fix = screens.location.latest_fix
        payload = _fix_payload(fix) if fix else {"fix": None, "display": None}
        return {**payload, "tracking": screens.location.active}

    return app


def _camera_state(session: CameraSession) -> dict[str, str]:
    return {"state": session.state.value, "facing": session.facing.value}


def _fix_payload(fix: LocationFix) -> dict[str, object]:
    return {"fix": asdict(fix), "display": describe_fix(fix)}


def _status_for(error: FieldcamError) -> int:  # noqa: PLR0911
    if isinstance(error, PermissionDenied):
        return 403
    if isinstance(error, ResourceBusy | InvalidSessionState):
        return 409
    if isinstance(error, CapabilityTimeout):
        return 504
    if isinstance(error, HardwareUnavailable):
        return 503
    if isinstance(error, SaveError):
        return {
            SaveErrorKind.PERMISSION_MISSING: 403,
            SaveErrorKind.INSUFFICIENT_STORAGE: 507,
        }.get(error.kind, 500)
    if isinstance(error, NetworkError):
        return 502
    if isinstance(error, AuthRejected):
        return error.status_code if 400 <= error.status_code < 500 else 502
    if isinstance(error, InvalidCredentialsInput):
        return 422
    return 500
