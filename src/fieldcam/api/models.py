"""Pydantic models for control API request bodies."""

from pydantic import BaseModel, Field

from fieldcam.domain.capture import CameraFacing


class CameraOpenBody(BaseModel):
    """Options for opening the camera preview."""

    facing: CameraFacing | None = None


class WatchBody(BaseModel):
    """Thresholds for a location watch."""

    time_interval_ms: int | None = Field(default=None, ge=0)
    distance_interval_m: float | None = Field(default=None, ge=0)


class SaveBody(BaseModel):
    """Target album for saving the current photo."""

    album_name: str | None = None


class RegisterBody(BaseModel):
    """Sign-up form."""

    name: str = ""
    email: str = ""
    password: str = ""


class LoginBody(BaseModel):
    """Sign-in form."""

    email: str = ""
    password: str = ""
