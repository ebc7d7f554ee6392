"""Async client for the hosted identity provider's REST API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from pictoria.errors import UpstreamError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UserProfile:
    id: str
    email: str
    full_name: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "UserProfile":
        metadata = payload.get("user_metadata") or {}
        return cls(
            id=str(payload["id"]),
            email=str(payload.get("email") or ""),
            full_name=str(metadata.get("full_name") or ""),
        )


class IdentityClient:
    """Resolves session tokens and looks up users by id.

    Session resolution uses the public key on behalf of the caller; user
    lookup uses the service-role key against the admin endpoint.
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        service_role_key: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self.session = httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1",
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def get_session_user(self, access_token: str) -> UserProfile | None:
        """Return the user owning ``access_token``, or None if it is invalid or expired."""
        try:
            response = await self.session.get(
                "/user",
                headers={"apikey": self.anon_key, "Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            raise UpstreamError.from_httpx("identity.get_session_user", exc) from exc

        if response.status_code in {401, 403}:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError.from_httpx("identity.get_session_user", exc) from exc
        return UserProfile.from_payload(response.json())

    async def get_user_by_id(self, user_id: str) -> UserProfile | None:
        """Admin lookup; None when no such user exists."""
        if not user_id:
            return None
        try:
            response = await self.session.get(
                f"/admin/users/{quote(user_id, safe='')}",
                headers={
                    "apikey": self.service_role_key,
                    "Authorization": f"Bearer {self.service_role_key}",
                },
            )
        except httpx.HTTPError as exc:
            raise UpstreamError.from_httpx("identity.get_user_by_id", exc) from exc

        # Malformed ids come back as 400/422 rather than 404.
        if response.status_code in {400, 404, 422}:
            logger.info("identity.user_not_found", user_id=user_id, status=response.status_code)
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError.from_httpx("identity.get_user_by_id", exc) from exc

        payload = response.json()
        # Some deployments wrap the record as {"user": {...}}.
        if "user" in payload and isinstance(payload["user"], dict):
            payload = payload["user"]
        return UserProfile.from_payload(payload)

    async def close(self) -> None:
        await self.session.aclose()
