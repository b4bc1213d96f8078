"""Location fixes and cancellable position watching."""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Protocol

from fieldcam.domain.location import LocationAccuracy, LocationFix, distance_m
from fieldcam.domain.permissions import CapabilityKind
from fieldcam.errors import CapabilityTimeout, HardwareUnavailable
from fieldcam.services.permissions import PermissionService
from fieldcam.services.resources import ExclusiveResources

_logger = logging.getLogger(__name__)

FixCallback = Callable[[LocationFix], None]


class PlatformSubscription(Protocol):
    """Handle returned by the platform for a position stream."""

    def remove(self) -> None:
        """Stop delivering positions."""


class LocationProvider(Protocol):
    """Interface for the device location subsystem."""

    async def get_current_fix(
        self, accuracy: LocationAccuracy, timeout_ms: int
    ) -> LocationFix:
        """Return a single fix; raise LocationServicesDisabled when GPS is off."""

    async def subscribe(
        self,
        accuracy: LocationAccuracy,
        min_interval_ms: int,
        min_distance_m: float,
        callback: FixCallback,
    ) -> PlatformSubscription:
        """Start a position stream; callback may run on any thread."""


@dataclass
class DeliveryThrottle:
    """Pass a fix when it moved far enough or enough time has elapsed."""

    min_interval_ms: int
    min_distance_m: float
    last_delivered: LocationFix | None = field(default=None, init=False)

    def admit(self, fix: LocationFix) -> bool:
        last = self.last_delivered
        if last is not None:
            elapsed = fix.timestamp - last.timestamp
            moved = distance_m(last.coords, fix.coords)
            if moved < self.min_distance_m and elapsed < self.min_interval_ms:
                return False
        self.last_delivered = fix
        return True


class SubscriptionHandle:
    """Cancellable token for an active stream of fixes.

    Once cancel() returns no new delivery starts; a delivery already running
    on the platform's thread may still finish.
    """

    def __init__(
        self,
        on_fix: FixCallback,
        throttle: DeliveryThrottle,
        on_cancel: Callable[[], None],
    ) -> None:
        self._on_fix = on_fix
        self._throttle = throttle
        self._on_cancel = on_cancel
        self._platform: PlatformSubscription | None = None
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def cancel(self) -> None:
        """Stop the stream. Calling it again does nothing."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            platform, self._platform = self._platform, None
        if platform is not None:
            _remove_quietly(platform)
        self._on_cancel()

    def deliver(self, fix: LocationFix) -> None:
        """Entry point handed to the platform as the position callback."""
        with self._lock:
            if not self._active or not self._throttle.admit(fix):
                return
        try:
            self._on_fix(fix)
        except Exception:
            _logger.exception("Location callback raised")

    def attach(self, platform: PlatformSubscription) -> None:
        with self._lock:
            if self._active:
                self._platform = platform
                return
        _remove_quietly(platform)


@dataclass
class LocationSession:
    """One-shot fixes and a single position watch for one screen."""

    provider: LocationProvider
    permission_service: PermissionService
    resources: ExclusiveResources
    accuracy: LocationAccuracy = LocationAccuracy.BALANCED
    fix_timeout_seconds: float = 15.0
    time_interval_ms: int = 2000
    distance_interval_m: float = 5.0
    latest_fix: LocationFix | None = field(default=None, init=False)
    _handle: SubscriptionHandle | None = field(default=None, init=False, repr=False)

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    async def get_fix(self) -> LocationFix:
        """Return the current position."""
        await self.permission_service.ensure_granted(CapabilityKind.LOCATION)
        timeout_ms = int(self.fix_timeout_seconds * 1000)
        try:
            fix = await asyncio.wait_for(
                self.provider.get_current_fix(self.accuracy, timeout_ms),
                timeout=self.fix_timeout_seconds,
            )
        except TimeoutError as error:
            raise CapabilityTimeout(
                f"No location fix within {self.fix_timeout_seconds:g}s"
            ) from error
        except HardwareUnavailable:
            raise
        except Exception as error:
            raise HardwareUnavailable("Unable to get location") from error
        self.latest_fix = fix
        return fix

    async def watch(
        self,
        on_fix: FixCallback,
        *,
        time_interval_ms: int | None = None,
        distance_interval_m: float | None = None,
    ) -> SubscriptionHandle:
        """Start watching the position, replacing any active watch."""
        await self.permission_service.ensure_granted(CapabilityKind.LOCATION)
        self.stop()
        interval = (
            self.time_interval_ms if time_interval_ms is None else time_interval_ms
        )
        distance = (
            self.distance_interval_m
            if distance_interval_m is None
            else distance_interval_m
        )
        self.resources.claim(CapabilityKind.LOCATION, self)

        def forward(fix: LocationFix) -> None:
            self.latest_fix = fix
            on_fix(fix)

        def release() -> None:
            if self._handle is handle:
                self._handle = None
            self.resources.release(CapabilityKind.LOCATION, self)
            _logger.info("Location watch stopped")

        handle = SubscriptionHandle(
            on_fix=forward,
            throttle=DeliveryThrottle(
                min_interval_ms=interval, min_distance_m=distance
            ),
            on_cancel=release,
        )
        self._handle = handle
        try:
            platform = await self.provider.subscribe(
                self.accuracy, interval, distance, handle.deliver
            )
        except Exception as error:
            handle.cancel()
            raise HardwareUnavailable("Unable to watch location") from error
        handle.attach(platform)
        _logger.info(
            "Location watch started: interval=%sms distance=%sm", interval, distance
        )
        return handle

    def stop(self) -> None:
        """Cancel the active watch, if any."""
        if self._handle is not None:
            self._handle.cancel()

    async def close(self) -> None:
        self.stop()

    async def __aenter__(self) -> "LocationSession":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


@dataclass
class LocationService:
    """Create location sessions bound to the shared location subsystem."""

    provider: LocationProvider
    permission_service: PermissionService
    resources: ExclusiveResources
    accuracy: LocationAccuracy = LocationAccuracy.BALANCED
    fix_timeout_seconds: float = 15.0
    time_interval_ms: int = 2000
    distance_interval_m: float = 5.0

    def session(self) -> LocationSession:
        """Return a new idle session owned by the caller."""
        return LocationSession(
            provider=self.provider,
            permission_service=self.permission_service,
            resources=self.resources,
            accuracy=self.accuracy,
            fix_timeout_seconds=self.fix_timeout_seconds,
            time_interval_ms=self.time_interval_ms,
            distance_interval_m=self.distance_interval_m,
        )


def _remove_quietly(platform: PlatformSubscription) -> None:
    try:
        platform.remove()
    except Exception:
        _logger.exception("Failed to remove platform location subscription")
