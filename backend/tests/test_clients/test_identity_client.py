"""Tests for the identity provider HTTP client."""

import pytest
import respx
from httpx import Response

from pictoria.clients.identity_client import IdentityClient
from pictoria.errors import UpstreamError

BASE = "https://project.supabase.test"


def _client() -> IdentityClient:
    return IdentityClient(base_url=BASE, anon_key="anon", service_role_key="service")


@pytest.mark.asyncio
async def test_get_session_user_resolves_token():
    client = _client()

    with respx.mock:
        route = respx.get(f"{BASE}/auth/v1/user").mock(
            return_value=Response(
                200,
                json={"id": "u1", "email": "ada@example.com", "user_metadata": {"full_name": "Ada Lovelace"}},
            )
        )
        user = await client.get_session_user("jwt-token")

    assert user.id == "u1"
    assert user.email == "ada@example.com"
    assert user.full_name == "Ada Lovelace"
    request = route.calls.last.request
    assert request.headers["apikey"] == "anon"
    assert request.headers["Authorization"] == "Bearer jwt-token"

    await client.close()


@pytest.mark.asyncio
async def test_get_session_user_returns_none_for_expired_token():
    client = _client()

    with respx.mock:
        respx.get(f"{BASE}/auth/v1/user").mock(return_value=Response(401, json={"msg": "expired"}))
        user = await client.get_session_user("expired")

    assert user is None

    await client.close()


@pytest.mark.asyncio
async def test_get_user_by_id_uses_service_role_and_unwraps_envelope():
    client = _client()

    with respx.mock:
        route = respx.get(f"{BASE}/auth/v1/admin/users/u1").mock(
            return_value=Response(200, json={"user": {"id": "u1", "email": "ada@example.com", "user_metadata": {}}})
        )
        user = await client.get_user_by_id("u1")

    assert user.id == "u1"
    assert user.full_name == ""
    assert route.calls.last.request.headers["Authorization"] == "Bearer service"

    await client.close()


@pytest.mark.asyncio
async def test_get_user_by_id_missing_user_returns_none():
    client = _client()

    with respx.mock:
        respx.get(f"{BASE}/auth/v1/admin/users/ghost").mock(return_value=Response(404, json={"msg": "User not found"}))
        assert await client.get_user_by_id("ghost") is None

    assert await client.get_user_by_id("") is None

    await client.close()


@pytest.mark.asyncio
async def test_identity_outage_raises_upstream_error():
    client = _client()

    with respx.mock:
        respx.get(f"{BASE}/auth/v1/admin/users/u1").mock(return_value=Response(502))

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_user_by_id("u1")

    assert exc_info.value.retryable is True

    await client.close()


@pytest.mark.asyncio
async def test_get_user_by_id_quotes_the_path_segment():
    client = _client()

    with respx.mock:
        route = respx.get(url__startswith=f"{BASE}/auth/v1/admin/users/").mock(
            return_value=Response(404, json={"msg": "User not found"})
        )
        assert await client.get_user_by_id("../settings") is None

    assert route.calls.last.request.url.raw_path == b"/auth/v1/admin/users/..%2Fsettings"

    await client.close()
