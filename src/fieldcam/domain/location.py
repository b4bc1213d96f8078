"""Domain models and display helpers for location fixes."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

_EARTH_RADIUS_M = 6_371_000.0


class LocationAccuracy(StrEnum):
    """Accuracy hint passed to the location subsystem."""

    LOWEST = "lowest"
    LOW = "low"
    BALANCED = "balanced"
    HIGH = "high"
    HIGHEST = "highest"
    BEST_FOR_NAVIGATION = "best_for_navigation"


@dataclass(frozen=True)
class Coordinates:
    """Position and derived metrics of a single fix."""

    latitude: float
    longitude: float
    altitude: float | None = None
    accuracy: float | None = None
    altitude_accuracy: float | None = None
    speed: float | None = None
    heading: float | None = None


@dataclass(frozen=True)
class LocationFix:
    """A single location measurement; timestamp is epoch milliseconds."""

    coords: Coordinates
    timestamp: int

    @property
    def captured_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=UTC)


def distance_m(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two coordinates in metres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    return 2 * _EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def format_coordinates(coords: Coordinates | None) -> str:
    if coords is None:
        return "N/A"
    return f"{coords.latitude:.6f}, {coords.longitude:.6f}"


def format_altitude(coords: Coordinates) -> str:
    if not coords.altitude:
        return "N/A"
    return f"{coords.altitude:.2f} m"


def format_accuracy(coords: Coordinates) -> str:
    if not coords.accuracy:
        return "N/A"
    return f"±{coords.accuracy:.2f} m"


def format_speed(coords: Coordinates) -> str:
    """Render speed (reported in m/s) as km/h."""
    if not coords.speed:
        return "N/A"
    return f"{coords.speed * 3.6:.2f} km/h"


def format_heading(coords: Coordinates) -> str:
    if not coords.heading:
        return "N/A"
    return f"{coords.heading:.2f}°"


def format_timestamp(timestamp: int | None) -> str:
    if not timestamp:
        return "N/A"
    moment = datetime.fromtimestamp(timestamp / 1000, tz=UTC)
    return moment.strftime("%Y-%m-%d %H:%M:%S %Z")


def describe_fix(fix: LocationFix) -> dict[str, str]:
    """Build the labelled rows shown in the location info panel."""
    return {
        "coordinates": format_coordinates(fix.coords),
        "altitude": format_altitude(fix.coords),
        "accuracy": format_accuracy(fix.coords),
        "speed": format_speed(fix.coords),
        "heading": format_heading(fix.coords),
        "timestamp": format_timestamp(fix.timestamp),
    }
