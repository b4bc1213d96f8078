"""Process-wide claims on exclusive device hardware."""

import threading

from fieldcam.domain.permissions import CapabilityKind
from fieldcam.errors import ResourceBusy


class ExclusiveResources:
    """Claim table allowing a single holder per capability.

    Claims fail fast instead of queueing.
    """

    def __init__(self) -> None:
        self._holders: dict[CapabilityKind, object] = {}
        self._lock = threading.Lock()

    def claim(self, kind: CapabilityKind, owner: object) -> None:
        """Claim the resource for owner or raise ResourceBusy."""
        with self._lock:
            holder = self._holders.get(kind)
            if holder is not None and holder is not owner:
                raise ResourceBusy(kind)
            self._holders[kind] = owner

    def release(self, kind: CapabilityKind, owner: object) -> None:
        """Drop owner's claim; no-op when owner does not hold it."""
        with self._lock:
            if self._holders.get(kind) is owner:
                del self._holders[kind]

    def holder(self, kind: CapabilityKind) -> object | None:
        with self._lock:
            return self._holders.get(kind)
