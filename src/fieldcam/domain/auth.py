"""Models for the authentication API payloads."""

from pydantic import BaseModel, ConfigDict


class RegisterRequest(BaseModel):
    """Body of POST /register."""

    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    """Body of POST /login."""

    email: str
    password: str


class AuthUser(BaseModel):
    """User record returned by the authentication API."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    email: str | None = None


class AuthResponse(BaseModel):
    """Successful authentication response."""

    message: str = ""
    user: AuthUser | None = None
