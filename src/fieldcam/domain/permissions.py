"""Domain models for device permissions."""

from dataclasses import dataclass
from enum import StrEnum


class CapabilityKind(StrEnum):
    """Device feature gated by an OS permission."""

    CAMERA = "camera"
    MEDIA_LIBRARY = "media_library"
    LOCATION = "location"


class PermissionStatus(StrEnum):
    """Permission status as reported by the OS."""

    UNDETERMINED = "undetermined"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class PermissionResponse:
    """Answer from the OS permission subsystem."""

    status: PermissionStatus
    can_ask_again: bool = True

    @property
    def granted(self) -> bool:
        return self.status is PermissionStatus.GRANTED

    @property
    def permanently_denied(self) -> bool:
        """Denied with no way to re-prompt; only system settings can fix it."""
        return self.status is PermissionStatus.DENIED and not self.can_ask_again
