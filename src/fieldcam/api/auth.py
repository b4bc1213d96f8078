"""Account endpoints backed by the authentication API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from fieldcam.api.models import LoginBody, RegisterBody

if TYPE_CHECKING:
    from fieldcam.containers import AppContainer

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
async def register(body: RegisterBody, request: Request) -> dict[str, object]:
    """Create an account; the user signs in separately."""
    container: AppContainer = request.app.state.container
    response = await container.auth_service.register(
        body.name, body.email, body.password
    )
    return {"message": response.message}


@router.post("/login")
async def login(body: LoginBody, request: Request) -> dict[str, object]:
    """Sign in and remember the user on this device."""
    container: AppContainer = request.app.state.container
    response = await container.auth_service.login(body.email, body.password)
    user = response.user.model_dump() if response.user else None
    return {"message": response.message, "user": user}


@router.post("/logout")
async def logout(request: Request) -> dict[str, str]:
    """Forget the remembered user."""
    container: AppContainer = request.app.state.container
    container.auth_service.logout()
    return {"message": "You have been logged out successfully"}


@router.get("/me")
async def current_user(request: Request) -> dict[str, object]:
    """Return the remembered user, if any."""
    container: AppContainer = request.app.state.container
    user = container.auth_service.current_user()
    return {"user": user.model_dump() if user else None}
