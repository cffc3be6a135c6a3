"""
NoteShare Backend - Supabase Identity Client Tests
====================================================

What:  Tests for SupabaseIdentityProvider's HTTP contract and error mapping.
How:   httpx.MockTransport answers in place of the Supabase Auth API.

What we test:
    ✅ Request shape of signup, password sign-in and OTP verification
    ✅ Error responses → IdentityServiceError(rejected=True) with the service's message
    ✅ Transport failures → IdentityServiceError(rejected=False)
"""

import json

import httpx
import pytest

from noteshare.exceptions import IdentityServiceError
from noteshare.services.identity_service import SupabaseIdentityProvider

BASE_URL = "https://project.supabase.co"
USER = {"id": "5f1c", "email": "ada@spelman.edu"}


def make_provider(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseIdentityProvider(client=client, base_url=BASE_URL + "/", api_key="service-key")


class TestRequests:

    @pytest.mark.asyncio
    async def test_sign_up_sends_metadata(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=USER)

        provider = make_provider(handler)
        user = await provider.sign_up("ada@spelman.edu", "pw", metadata={"name": "Ada"})

        assert user == USER
        [request] = seen
        assert str(request.url) == f"{BASE_URL}/auth/v1/signup"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"
        assert json.loads(request.content) == {
            "email": "ada@spelman.edu",
            "password": "pw",
            "data": {"name": "Ada"},
        }

    @pytest.mark.asyncio
    async def test_sign_up_unwraps_session_response(self):
        provider = make_provider(lambda request: httpx.Response(200, json={"access_token": "t", "user": USER}))

        assert await provider.sign_up("ada@spelman.edu", "pw") == USER

    @pytest.mark.asyncio
    async def test_sign_in_uses_password_grant(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "t", "user": USER})

        provider = make_provider(handler)
        user = await provider.sign_in_with_password("ada@spelman.edu", "pw")

        assert user == USER
        assert seen[0].url.path == "/auth/v1/token"
        assert seen[0].url.params["grant_type"] == "password"

    @pytest.mark.asyncio
    async def test_sign_in_without_user_is_an_error(self):
        provider = make_provider(lambda request: httpx.Response(200, json={"access_token": "t"}))

        with pytest.raises(IdentityServiceError):
            await provider.sign_in_with_password("ada@spelman.edu", "pw")

    @pytest.mark.asyncio
    async def test_verify_sends_signup_type(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"user": USER})

        provider = make_provider(handler)
        await provider.verify_otp("ada@spelman.edu", "123456")

        assert seen[0].url.path == "/auth/v1/verify"
        assert json.loads(seen[0].content) == {
            "type": "signup",
            "email": "ada@spelman.edu",
            "token": "123456",
        }


class TestErrors:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body, expected",
        [
            ({"msg": "User already registered"}, "User already registered"),
            ({"error": "invalid_grant", "error_description": "Invalid login credentials"},
             "Invalid login credentials"),
            ({"message": "Token has expired or is invalid"}, "Token has expired or is invalid"),
            ({}, "Identity service error (400)"),
        ],
    )
    async def test_error_response_is_rejected_with_service_message(self, body, expected):
        provider = make_provider(lambda request: httpx.Response(400, json=body))

        with pytest.raises(IdentityServiceError) as exc_info:
            await provider.sign_up("ada@spelman.edu", "pw")

        assert exc_info.value.rejected is True
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == expected

    @pytest.mark.asyncio
    async def test_transport_error_is_not_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)

        with pytest.raises(IdentityServiceError) as exc_info:
            await provider.verify_otp("ada@spelman.edu", "123456")

        assert exc_info.value.rejected is False
        assert exc_info.value.message == "Identity service is unavailable"

    @pytest.mark.asyncio
    async def test_invalid_json_is_not_rejected(self):
        provider = make_provider(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(IdentityServiceError) as exc_info:
            await provider.sign_up("ada@spelman.edu", "pw")

        assert exc_info.value.rejected is False
