"""Domain models for captured photos."""

from dataclasses import dataclass
from enum import StrEnum


class CameraFacing(StrEnum):
    """Which lens the camera preview uses."""

    BACK = "back"
    FRONT = "front"

    def opposite(self) -> "CameraFacing":
        return CameraFacing.FRONT if self is CameraFacing.BACK else CameraFacing.BACK


@dataclass(frozen=True)
class Photo:
    """A photo produced by the camera or picked from the gallery."""

    uri: str
    width: int
    height: int
