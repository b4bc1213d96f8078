"""Error types raised by capability sessions and collaborators."""

from enum import StrEnum

from fieldcam.domain.permissions import CapabilityKind


class FieldcamError(Exception):
    """Base class for every recoverable failure in the app."""


class PermissionDenied(FieldcamError):
    """The user has not granted access to a capability."""

    def __init__(self, kind: CapabilityKind) -> None:
        super().__init__(f"Permission for {kind} was denied")
        self.kind = kind


class PermissionPermanentlyDenied(PermissionDenied):
    """Access is denied and the OS will not show the prompt again."""

    def __init__(self, kind: CapabilityKind) -> None:
        super().__init__(kind)
        self.args = (f"Permission for {kind} is permanently denied",)


class ResourceBusy(FieldcamError):
    """An exclusive device resource is already held by another session."""

    def __init__(self, kind: CapabilityKind) -> None:
        super().__init__(f"{kind} is already in use")
        self.kind = kind


class InvalidSessionState(FieldcamError):
    """An operation was invoked from a state that does not allow it."""


class HardwareUnavailable(FieldcamError):
    """The device could not provide the requested capability."""


class CaptureFailed(HardwareUnavailable):
    """Taking a picture failed; the camera session stays usable."""


class LocationServicesDisabled(HardwareUnavailable):
    """Location services are turned off at the OS level."""


class CapabilityTimeout(FieldcamError):
    """The device did not answer within the configured deadline."""


class SaveErrorKind(StrEnum):
    """Why persisting a photo to the media store failed."""

    PERMISSION_MISSING = "permission_missing"
    INSUFFICIENT_STORAGE = "insufficient_storage"
    UNKNOWN = "unknown"


class SaveError(FieldcamError):
    """A photo could not be saved to the media store."""

    def __init__(self, kind: SaveErrorKind, detail: str = "") -> None:
        super().__init__(detail or str(kind))
        self.kind = kind
        self.detail = detail


class NetworkError(FieldcamError):
    """The authentication backend could not be reached."""


class AuthRejected(FieldcamError):
    """The authentication backend answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidCredentialsInput(FieldcamError):
    """Required sign-in or sign-up fields are missing."""
