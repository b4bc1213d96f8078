"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from fieldcam.domain.capture import CameraFacing
from fieldcam.domain.location import LocationAccuracy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    auth_api_base_url: str = "http://localhost:5000/api"
    auth_timeout_seconds: float = 10.0
    gallery_album_name: str = "MyAppCamera"
    camera_default_facing: CameraFacing = CameraFacing.BACK
    camera_capture_quality: float = 0.8
    camera_ready_timeout_seconds: float = 10.0
    location_accuracy: LocationAccuracy = LocationAccuracy.BALANCED
    location_fix_timeout_seconds: float = 15.0
    location_watch_interval_ms: int = 2000
    location_watch_distance_m: float = 5.0
    user_store_path: str = ".fieldcam/user.json"
    media_root: str = "media"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
