"""Sign-up, sign-in and the locally remembered user."""

import logging
from dataclasses import dataclass
from typing import Protocol

from fieldcam.adapters.auth_client import AuthClient
from fieldcam.domain.auth import AuthResponse, AuthUser
from fieldcam.errors import InvalidCredentialsInput

_logger = logging.getLogger(__name__)


class UserStore(Protocol):
    """Persistence interface for the signed-in user."""

    def load(self) -> AuthUser | None:
        """Return the remembered user, if any."""

    def save(self, user: AuthUser) -> None:
        """Remember the signed-in user."""

    def clear(self) -> None:
        """Forget the remembered user."""


@dataclass
class AuthService:
    """Application service for the account screen."""

    client: AuthClient
    user_store: UserStore

    async def register(self, name: str, email: str, password: str) -> AuthResponse:
        """Create an account; the user still has to sign in afterwards."""
        if not (name.strip() and email.strip() and password):
            raise InvalidCredentialsInput("Please fill in all fields")
        response = await self.client.register(name.strip(), email.strip(), password)
        _logger.info("Registered user %s", email.strip())
        return response

    async def login(self, email: str, password: str) -> AuthResponse:
        """Sign in and remember the returned user."""
        if not (email.strip() and password):
            raise InvalidCredentialsInput("Please fill in all fields")
        response = await self.client.login(email.strip(), password)
        if response.user is not None:
            try:
                self.user_store.save(response.user)
            except OSError:
                _logger.exception("Error saving user data")
        _logger.info("Logged in user %s", email.strip())
        return response

    def logout(self) -> None:
        """Forget the signed-in user."""
        self.user_store.clear()

    def current_user(self) -> AuthUser | None:
        return self.user_store.load()
