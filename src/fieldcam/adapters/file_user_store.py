"""JSON file-backed store for the signed-in user."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from fieldcam.domain.auth import AuthUser
from fieldcam.services.auth import UserStore

_logger = logging.getLogger(__name__)


@dataclass
class FileUserStore(UserStore):
    """Keep the signed-in user in a private JSON file."""

    path: Path

    def load(self) -> AuthUser | None:
        """Read the user file; unreadable content counts as signed out."""
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return AuthUser.model_validate(payload)
        except ValueError:
            _logger.exception("Error loading user data from %s", self.path)
            return None

    def save(self, user: AuthUser) -> None:
        """Write the user file with owner-only permissions."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(user.model_dump(mode="json"), handle)
        self.path.chmod(0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
