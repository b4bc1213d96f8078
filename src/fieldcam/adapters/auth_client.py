"""Authentication API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from fieldcam.domain.auth import AuthResponse, LoginRequest, RegisterRequest
from fieldcam.errors import AuthRejected, NetworkError

_DEFAULT_FAILURE_MESSAGE = "Something went wrong"


class AuthClient(Protocol):
    """Interface for the authentication REST API."""

    async def register(self, name: str, email: str, password: str) -> AuthResponse:
        """Create an account."""

    async def login(self, email: str, password: str) -> AuthResponse:
        """Sign in and return the user record."""


@dataclass
class HttpxAuthClient(AuthClient):
    """Authentication client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 10.0) -> "HttpxAuthClient":
        """Create an auth client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def register(self, name: str, email: str, password: str) -> AuthResponse:
        """Register a user via POST /register."""
        body = RegisterRequest(name=name, email=email, password=password)
        return await self._post("/register", body.model_dump())

    async def login(self, email: str, password: str) -> AuthResponse:
        """Sign in via POST /login."""
        body = LoginRequest(email=email, password=password)
        return await self._post("/login", body.model_dump())

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _post(self, path: str, payload: dict[str, object]) -> AuthResponse:
        try:
            response = await self.http_client.post(
                f"{self.base_url}{path}", json=payload, timeout=self.timeout_seconds
            )
        except httpx.TransportError as error:
            raise NetworkError(str(error) or type(error).__name__) from error
        data = _json_or_empty(response)
        if response.is_success:
            return AuthResponse.model_validate(data)
        message = data.get("message") or _DEFAULT_FAILURE_MESSAGE
        raise AuthRejected(str(message), response.status_code)


def _json_or_empty(response: httpx.Response) -> dict[str, object]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
