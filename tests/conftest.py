"""Shared test fixtures."""

import asyncio
import json
import math
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest

from fieldcam.adapters.auth_client import HttpxAuthClient
from fieldcam.config import Settings
from fieldcam.containers import AppContainer, DevicePlatform
from fieldcam.domain.auth import AuthUser
from fieldcam.domain.capture import CameraFacing, Photo
from fieldcam.domain.location import (
    Coordinates,
    LocationAccuracy,
    LocationFix,
)
from fieldcam.domain.permissions import (
    CapabilityKind,
    PermissionResponse,
    PermissionStatus,
)
from fieldcam.services.auth import AuthService, UserStore
from fieldcam.services.camera import CameraHardware, CameraService
from fieldcam.services.location import (
    FixCallback,
    LocationProvider,
    LocationService,
)
from fieldcam.services.media import MediaPicker, MediaService, MediaStore
from fieldcam.services.permissions import PermissionGateway, PermissionService
from fieldcam.services.resources import ExclusiveResources

GRANTED = PermissionResponse(PermissionStatus.GRANTED)
DENIED = PermissionResponse(PermissionStatus.DENIED)
BLOCKED = PermissionResponse(PermissionStatus.DENIED, can_ask_again=False)
UNDETERMINED = PermissionResponse(PermissionStatus.UNDETERMINED)

ORIGIN = Coordinates(latitude=37.78825, longitude=-122.4324, accuracy=5.0)
_METRES_PER_DEGREE = 6_371_000.0 * math.pi / 180


def north_of(origin: Coordinates, metres: float) -> Coordinates:
    """Return a coordinate the given distance due north of origin."""
    return Coordinates(
        latitude=origin.latitude + metres / _METRES_PER_DEGREE,
        longitude=origin.longitude,
    )


def make_fix(coords: Coordinates = ORIGIN, timestamp: int = 1_700_000_000_000):
    return LocationFix(coords=coords, timestamp=timestamp)


@dataclass
class FakePermissionGateway(PermissionGateway):
    """Permission subsystem with scripted OS state and prompt answers."""

    statuses: dict[CapabilityKind, PermissionResponse] = field(default_factory=dict)
    answers: dict[CapabilityKind, PermissionResponse] = field(default_factory=dict)
    prompts: list[CapabilityKind] = field(default_factory=list)
    suspend: bool = False

    async def get_status(self, kind: CapabilityKind) -> PermissionResponse:
        if self.suspend:
            await asyncio.sleep(0)
        return self.statuses.get(kind, UNDETERMINED)

    async def request(self, kind: CapabilityKind) -> PermissionResponse:
        self.prompts.append(kind)
        answer = self.answers.get(kind, self.statuses.get(kind, UNDETERMINED))
        self.statuses[kind] = answer
        return answer


@dataclass
class FakeCameraHardware(CameraHardware):
    """Camera that records calls and reports readiness on demand."""

    ready_on_open: bool = True
    ready_from_thread: bool = False
    open_error: Exception | None = None
    capture_error: Exception | None = None
    capture_gate: asyncio.Event | None = None
    photo_uri: str | None = None
    opened: list[CameraFacing] = field(default_factory=list)
    closes: int = 0
    captures: int = 0
    ready_thread_ids: list[int] = field(default_factory=list)

    async def open_preview(
        self, facing: CameraFacing, on_ready: Callable[[], None]
    ) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened.append(facing)
        if not self.ready_on_open:
            return
        if not self.ready_from_thread:
            on_ready()
            return

        def signal_ready() -> None:
            self.ready_thread_ids.append(threading.get_ident())
            on_ready()

        threading.Thread(target=signal_ready).start()

    async def capture(self, quality: float) -> Photo:
        if self.capture_gate is not None:
            await self.capture_gate.wait()
        if self.capture_error is not None:
            raise self.capture_error
        self.captures += 1
        uri = self.photo_uri
        if uri is None:
            uri = f"file:///data/camera/photo-{self.captures}.jpg"
        return Photo(uri=uri, width=4032, height=3024)

    async def close_preview(self) -> None:
        self.closes += 1


@dataclass
class FakePlatformSubscription:
    """Platform position stream the tests push fixes through."""

    callback: FixCallback
    min_interval_ms: int
    min_distance_m: float
    removed: bool = False

    def remove(self) -> None:
        self.removed = True


@dataclass
class FakeLocationProvider(LocationProvider):
    """Location subsystem with a fixed answer and manual stream delivery."""

    fix: LocationFix = field(default_factory=make_fix)
    error: Exception | None = None
    delay_seconds: float = 0.0
    subscribe_error: Exception | None = None
    fix_calls: int = 0
    subscriptions: list[FakePlatformSubscription] = field(default_factory=list)
    max_live: int = 0

    async def get_current_fix(
        self, accuracy: LocationAccuracy, timeout_ms: int
    ) -> LocationFix:
        self.fix_calls += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.fix

    async def subscribe(
        self,
        accuracy: LocationAccuracy,
        min_interval_ms: int,
        min_distance_m: float,
        callback: FixCallback,
    ) -> FakePlatformSubscription:
        if self.subscribe_error is not None:
            raise self.subscribe_error
        subscription = FakePlatformSubscription(
            callback=callback,
            min_interval_ms=min_interval_ms,
            min_distance_m=min_distance_m,
        )
        self.subscriptions.append(subscription)
        self.max_live = max(self.max_live, len(self.live()))
        return subscription

    def live(self) -> list[FakePlatformSubscription]:
        return [sub for sub in self.subscriptions if not sub.removed]

    def emit(self, fix: LocationFix) -> None:
        for subscription in self.live():
            subscription.callback(fix)


@dataclass
class FakeMediaStore(MediaStore):
    """In-memory media library."""

    error: Exception | None = None
    assets: dict[str, str] = field(default_factory=dict)
    albums: dict[str, list[str]] = field(default_factory=dict)

    async def create_asset(self, uri: str) -> str:
        if self.error is not None:
            raise self.error
        asset_id = f"asset-{len(self.assets) + 1}"
        self.assets[asset_id] = uri
        return asset_id

    async def create_or_append_album(self, name: str, asset_id: str) -> None:
        self.albums.setdefault(name, []).append(asset_id)


@dataclass
class FakeMediaPicker(MediaPicker):
    """Image picker returning a preset result."""

    photo: Photo | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def pick_image(
        self, *, allows_editing: bool, aspect: tuple[int, int], quality: float
    ) -> Photo | None:
        self.calls.append(
            {"allows_editing": allows_editing, "aspect": aspect, "quality": quality}
        )
        return self.photo


@dataclass
class InMemoryUserStore(UserStore):
    """User store kept in memory for tests."""

    user: AuthUser | None = None
    saves: int = 0
    save_error: Exception | None = None

    def load(self) -> AuthUser | None:
        return self.user

    def save(self, user: AuthUser) -> None:
        if self.save_error is not None:
            raise self.save_error
        self.saves += 1
        self.user = user

    def clear(self) -> None:
        self.user = None


@dataclass
class FakeAuthBackend:
    """Mock transport handler mimicking the authentication server."""

    users: dict[str, dict[str, str]] = field(default_factory=dict)
    requests: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content.decode())
        self.requests.append((request.url.path, payload))
        if request.url.path.endswith("/register"):
            if payload["email"] in self.users:
                return httpx.Response(400, json={"message": "User already exists"})
            self.users[payload["email"]] = payload
            return httpx.Response(
                201,
                json={
                    "message": "User registered successfully",
                    "user": {"name": payload["name"], "email": payload["email"]},
                },
            )
        if request.url.path.endswith("/login"):
            user = self.users.get(payload["email"])
            if user is None or user["password"] != payload["password"]:
                return httpx.Response(401, json={"message": "Invalid credentials"})
            return httpx.Response(
                200,
                json={
                    "message": "Login successful",
                    "user": {"id": "u-1", "name": user["name"], "email": user["email"]},
                },
            )
        return httpx.Response(404, json={"message": "Not found"})


def make_auth_client(handler: Callable[[httpx.Request], httpx.Response]):
    transport = httpx.MockTransport(handler)
    return HttpxAuthClient(
        base_url="http://auth.test/api",
        http_client=httpx.AsyncClient(transport=transport),
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        auth_api_base_url="http://auth.test/api",
        user_store_path=str(tmp_path / "user.json"),
        media_root=str(tmp_path / "media"),
        camera_ready_timeout_seconds=0.5,
        location_fix_timeout_seconds=0.5,
    )


@pytest.fixture
def gateway() -> FakePermissionGateway:
    return FakePermissionGateway(
        statuses={kind: GRANTED for kind in CapabilityKind},
    )


@pytest.fixture
def camera_hardware() -> FakeCameraHardware:
    return FakeCameraHardware()


@pytest.fixture
def location_provider() -> FakeLocationProvider:
    return FakeLocationProvider()


@pytest.fixture
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def media_picker() -> FakeMediaPicker:
    return FakeMediaPicker()


@pytest.fixture
def auth_backend() -> FakeAuthBackend:
    return FakeAuthBackend(
        users={
            "ada@example.com": {
                "name": "Ada",
                "email": "ada@example.com",
                "password": "correct-horse",
            }
        }
    )


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def platform(
    gateway: FakePermissionGateway,
    camera_hardware: FakeCameraHardware,
    location_provider: FakeLocationProvider,
    media_picker: FakeMediaPicker,
    media_store: FakeMediaStore,
) -> DevicePlatform:
    return DevicePlatform(
        permissions=gateway,
        camera=camera_hardware,
        location=location_provider,
        picker=media_picker,
        media_store=media_store,
    )


@pytest.fixture
def container(
    settings: Settings,
    platform: DevicePlatform,
    auth_backend: FakeAuthBackend,
    user_store: InMemoryUserStore,
) -> AppContainer:
    resources = ExclusiveResources()
    permission_service = PermissionService(platform.permissions)
    camera_service = CameraService(
        hardware=platform.camera,
        permission_service=permission_service,
        resources=resources,
        ready_timeout_seconds=settings.camera_ready_timeout_seconds,
    )
    location_service = LocationService(
        provider=platform.location,
        permission_service=permission_service,
        resources=resources,
        fix_timeout_seconds=settings.location_fix_timeout_seconds,
    )
    media_service = MediaService(
        store=platform.media_store,
        picker=platform.picker,
        permission_service=permission_service,
    )
    auth_service = AuthService(
        client=make_auth_client(auth_backend), user_store=user_store
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        resources=resources,
        permission_service=permission_service,
        camera_service=camera_service,
        location_service=location_service,
        media_service=media_service,
        auth_service=auth_service,
        close_resources=close_resources,
    )
