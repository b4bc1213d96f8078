"""Capability request flow on top of the OS permission subsystem."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from fieldcam.domain.permissions import (
    CapabilityKind,
    PermissionResponse,
    PermissionStatus,
)
from fieldcam.errors import PermissionDenied, PermissionPermanentlyDenied

_logger = logging.getLogger(__name__)


class PermissionGateway(Protocol):
    """Interface for the OS permission subsystem."""

    async def get_status(self, kind: CapabilityKind) -> PermissionResponse:
        """Return the current status without prompting the user."""

    async def request(self, kind: CapabilityKind) -> PermissionResponse:
        """Show the native permission prompt and return the user's answer."""


@dataclass
class PermissionCache:
    """Last known permission response per capability."""

    entries: dict[CapabilityKind, PermissionResponse] = field(default_factory=dict)

    def get(self, kind: CapabilityKind) -> PermissionResponse | None:
        return self.entries.get(kind)

    def record(self, kind: CapabilityKind, response: PermissionResponse) -> None:
        self.entries[kind] = response

    def status(self, kind: CapabilityKind) -> PermissionStatus:
        entry = self.entries.get(kind)
        return entry.status if entry else PermissionStatus.UNDETERMINED


@dataclass
class PermissionService:
    """Resolve whether a capability may be used, prompting when needed."""

    gateway: PermissionGateway
    cache: PermissionCache = field(default_factory=PermissionCache)

    async def current_status(self, kind: CapabilityKind) -> PermissionStatus:
        """Read the OS status without showing a prompt."""
        response = await self.gateway.get_status(kind)
        self.cache.record(kind, response)
        return response.status

    async def request_capability(self, kind: CapabilityKind) -> PermissionStatus:
        """Return the status for a capability, prompting at most once.

        Raises PermissionPermanentlyDenied when the OS will not prompt again.
        """
        current = await self.gateway.get_status(kind)
        self.cache.record(kind, current)
        if current.granted:
            return current.status
        if current.permanently_denied:
            raise PermissionPermanentlyDenied(kind)

        _logger.info("Requesting %s permission", kind)
        answer = await self.gateway.request(kind)
        self.cache.record(kind, answer)
        if answer.permanently_denied:
            raise PermissionPermanentlyDenied(kind)
        if not answer.granted:
            _logger.info("Permission for %s was %s", kind, answer.status)
        return answer.status

    async def ensure_granted(self, kind: CapabilityKind) -> None:
        """Raise PermissionDenied unless the capability ends up granted."""
        status = await self.request_capability(kind)
        if status is not PermissionStatus.GRANTED:
            raise PermissionDenied(kind)
