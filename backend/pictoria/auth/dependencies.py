"""FastAPI dependencies resolving the caller's session."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from pictoria.api.deps import get_app_settings, get_identity_client
from pictoria.clients.identity_client import IdentityClient, UserProfile
from pictoria.config import Settings
from pictoria.errors import AuthenticationError


def get_session_token(request: Request, settings: Annotated[Settings, Depends(get_app_settings)]) -> str | None:
    """Bearer token from the Authorization header, else the session cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    cookie = request.cookies.get(settings.session_cookie_name)
    return cookie or None


async def get_optional_user(
    token: Annotated[str | None, Depends(get_session_token)],
    identity: Annotated[IdentityClient, Depends(get_identity_client)],
) -> UserProfile | None:
    """Resolve the session user; None when there is no valid session."""
    if not token:
        return None
    return await identity.get_session_user(token)


async def require_user(user: Annotated[UserProfile | None, Depends(get_optional_user)]) -> UserProfile:
    if user is None:
        raise AuthenticationError("Unauthorised")
    return user
