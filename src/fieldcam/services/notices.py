"""User-facing messages for recoverable failures."""

from dataclasses import dataclass

from fieldcam.domain.permissions import CapabilityKind
from fieldcam.errors import (
    AuthRejected,
    CapabilityTimeout,
    CaptureFailed,
    FieldcamError,
    HardwareUnavailable,
    InvalidCredentialsInput,
    InvalidSessionState,
    LocationServicesDisabled,
    NetworkError,
    PermissionDenied,
    PermissionPermanentlyDenied,
    ResourceBusy,
    SaveError,
    SaveErrorKind,
)


@dataclass(frozen=True)
class Notice:
    """Alert shown to the user, with the follow-up it offers."""

    title: str
    message: str
    retry: bool = True
    open_settings: bool = False


_PERMISSION_TITLES = {
    CapabilityKind.CAMERA: "Camera Permission Required",
    CapabilityKind.MEDIA_LIBRARY: "Permission Required",
    CapabilityKind.LOCATION: "Location Permission Required",
}

_PERMISSION_MESSAGES = {
    CapabilityKind.CAMERA: "Camera access is required to take photos.",
    CapabilityKind.MEDIA_LIBRARY: "Gallery access is required to save photos.",
    CapabilityKind.LOCATION: (
        "This app needs location access to show your current position."
    ),
}

_SAVE_MESSAGES = {
    SaveErrorKind.PERMISSION_MISSING: (
        "Gallery access is required to save photos. "
        "Please enable storage permission in settings."
    ),
    SaveErrorKind.INSUFFICIENT_STORAGE: (
        "There is not enough free storage to save the image."
    ),
    SaveErrorKind.UNKNOWN: "Failed to save image to gallery",
}


def notice_for(error: FieldcamError) -> Notice:  # noqa: PLR0911
    """Translate an app error into the alert the user should see."""
    if isinstance(error, PermissionPermanentlyDenied):
        return Notice(
            title=_PERMISSION_TITLES[error.kind],
            message=(
                f"{_PERMISSION_MESSAGES[error.kind]} "
                "Please enable it in your device settings."
            ),
            retry=False,
            open_settings=True,
        )
    if isinstance(error, PermissionDenied):
        return Notice(
            title=_PERMISSION_TITLES[error.kind],
            message=(
                f"{_PERMISSION_MESSAGES[error.kind]} "
                "Please grant permission to continue."
            ),
        )
    if isinstance(error, ResourceBusy):
        return Notice(
            title="Busy", message=f"The {error.kind} is in use by another screen."
        )
    if isinstance(error, CaptureFailed):
        return Notice(title="Error", message="Failed to take picture")
    if isinstance(error, LocationServicesDisabled):
        return Notice(
            title="Error",
            message="Unable to get location. Please ensure GPS is enabled.",
        )
    if isinstance(error, HardwareUnavailable):
        return Notice(title="Error", message=str(error) or "Device unavailable")
    if isinstance(error, CapabilityTimeout):
        return Notice(title="Timed Out", message=str(error))
    if isinstance(error, SaveError):
        return Notice(
            title="Error",
            message=_SAVE_MESSAGES[error.kind],
            open_settings=error.kind is SaveErrorKind.PERMISSION_MISSING,
        )
    if isinstance(error, NetworkError):
        return Notice(
            title="Error",
            message="Network error. Please make sure the backend server is running.",
        )
    if isinstance(error, AuthRejected):
        return Notice(title="Error", message=error.message)
    if isinstance(error, InvalidCredentialsInput):
        return Notice(title="Error", message=str(error), retry=False)
    if isinstance(error, InvalidSessionState):
        return Notice(title="Error", message=str(error), retry=False)
    return Notice(title="Error", message=str(error) or "Something went wrong")
