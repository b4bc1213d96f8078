"""Camera preview session state machine."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from types import TracebackType
from typing import Protocol

from fieldcam.domain.capture import CameraFacing, Photo
from fieldcam.domain.permissions import CapabilityKind
from fieldcam.errors import CaptureFailed, HardwareUnavailable, InvalidSessionState
from fieldcam.services.permissions import PermissionService
from fieldcam.services.resources import ExclusiveResources

_logger = logging.getLogger(__name__)


class CameraHardware(Protocol):
    """Interface for the device camera."""

    async def open_preview(
        self, facing: CameraFacing, on_ready: Callable[[], None]
    ) -> None:
        """Start the preview; the platform calls on_ready once frames flow."""

    async def capture(self, quality: float) -> Photo:
        """Take a picture from the live preview."""

    async def close_preview(self) -> None:
        """Stop the preview and release the hardware handle."""


class CameraState(StrEnum):
    """Lifecycle states of a camera session."""

    CLOSED = "closed"
    OPENING = "opening"
    READY = "ready"
    CAPTURING = "capturing"
    FAILED = "failed"


@dataclass
class CameraSession:
    """Exclusive use of the camera by a single screen."""

    hardware: CameraHardware
    permission_service: PermissionService
    resources: ExclusiveResources
    facing: CameraFacing = CameraFacing.BACK
    quality: float = 0.8
    ready_timeout_seconds: float = 10.0
    state: CameraState = field(default=CameraState.CLOSED, init=False)
    last_error: Exception | None = field(default=None, init=False)
    _preview_live: bool = field(default=False, init=False, repr=False)
    _wake: Callable[[], None] | None = field(default=None, init=False, repr=False)

    async def open(self, facing: CameraFacing | None = None) -> None:
        """Acquire the camera and wait until the preview is ready."""
        if self.state not in {CameraState.CLOSED, CameraState.FAILED}:
            raise InvalidSessionState(f"Cannot open camera while {self.state}")
        previous = self.state
        self._transition(CameraState.OPENING)
        try:
            await self.permission_service.ensure_granted(CapabilityKind.CAMERA)
            self._check_still_opening()
            self.resources.claim(CapabilityKind.CAMERA, self)
        except BaseException:
            if self.state is CameraState.OPENING:
                self._transition(previous)
            raise
        if facing is not None:
            self.facing = facing
        self.last_error = None
        await self._start_preview()

    async def capture(self) -> Photo:
        """Take a picture; a failure leaves the session ready."""
        if self.state is not CameraState.READY:
            raise InvalidSessionState(f"Cannot capture while {self.state}")
        self._transition(CameraState.CAPTURING)
        try:
            photo = await self.hardware.capture(self.quality)
        except Exception as error:
            _logger.warning("Camera capture failed: %s", error)
            raise CaptureFailed("Failed to take picture") from error
        finally:
            if self.state is CameraState.CAPTURING:
                self._transition(CameraState.READY)
        if not photo.uri:
            raise CaptureFailed("Camera returned a photo without a URI")
        _logger.info("Photo taken: %s", photo.uri)
        return photo

    async def switch_facing(self) -> None:
        """Reopen the preview with the opposite lens."""
        if self.state is not CameraState.READY:
            raise InvalidSessionState(f"Cannot switch camera while {self.state}")
        self._transition(CameraState.OPENING)
        await self._close_preview()
        self._check_still_opening()
        self.facing = self.facing.opposite()
        await self._start_preview()

    async def close(self) -> None:
        """Release the camera. Safe to call from any state."""
        previous = self.state
        self.state = CameraState.CLOSED
        if previous is not CameraState.CLOSED:
            _logger.info("Camera session %s -> %s", previous, CameraState.CLOSED)
        if self._wake is not None:
            self._wake()
        if self._preview_live:
            await self._close_preview()
        self.resources.release(CapabilityKind.CAMERA, self)

    async def __aenter__(self) -> "CameraSession":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _start_preview(self) -> None:
        loop = asyncio.get_running_loop()
        ready = asyncio.Event()

        def on_ready() -> None:
            loop.call_soon_threadsafe(ready.set)

        self._wake = on_ready
        self._preview_live = True
        try:
            await self.hardware.open_preview(self.facing, on_ready)
            await asyncio.wait_for(ready.wait(), timeout=self.ready_timeout_seconds)
        except TimeoutError:
            failure = HardwareUnavailable("Camera preview did not become ready in time")
        except Exception as error:
            failure = HardwareUnavailable(f"Camera preview failed to start: {error}")
            failure.__cause__ = error
        else:
            self._check_still_opening()
            self._transition(CameraState.READY)
            return
        finally:
            self._wake = None

        if self.state is not CameraState.OPENING:
            raise InvalidSessionState("Camera was closed while opening") from failure
        await self._close_preview()
        self.resources.release(CapabilityKind.CAMERA, self)
        self.last_error = failure
        self._transition(CameraState.FAILED)
        raise failure

    def _check_still_opening(self) -> None:
        if self.state is not CameraState.OPENING:
            raise InvalidSessionState("Camera was closed while opening")

    async def _close_preview(self) -> None:
        self._preview_live = False
        try:
            await self.hardware.close_preview()
        except Exception:
            _logger.exception("Failed to close camera preview")

    def _transition(self, state: CameraState) -> None:
        _logger.info("Camera session %s -> %s", self.state, state)
        self.state = state


@dataclass
class CameraService:
    """Create camera sessions bound to the shared hardware."""

    hardware: CameraHardware
    permission_service: PermissionService
    resources: ExclusiveResources
    default_facing: CameraFacing = CameraFacing.BACK
    quality: float = 0.8
    ready_timeout_seconds: float = 10.0

    def session(self) -> CameraSession:
        """Return a new closed session owned by the caller."""
        return CameraSession(
            hardware=self.hardware,
            permission_service=self.permission_service,
            resources=self.resources,
            facing=self.default_facing,
            quality=self.quality,
            ready_timeout_seconds=self.ready_timeout_seconds,
        )
