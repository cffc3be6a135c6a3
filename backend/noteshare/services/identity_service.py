"""
NoteShare Backend - Identity Collaborator
===========================================

What:  Signup, password sign-in and one-time code verification, delegated to
       an external identity service.
How:   `IdentityProvider` is the abstract contract; `SupabaseIdentityProvider`
       implements it against the Supabase Auth (GoTrue) REST API with a shared
       httpx.AsyncClient.
Who:   Called by AuthService; tests substitute a fake provider.

Error contract:
    Every failure surfaces as IdentityServiceError.
    - rejected=True:  the identity service answered with an error response
                      (duplicate user, wrong password, expired code, ...)
    - rejected=False: the service could not be reached or answered with a
                      body we could not decode
    The message is the identity service's own message when it sent one.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from noteshare.exceptions import IdentityServiceError

logger = logging.getLogger(__name__)


class IdentityProvider(ABC):
    """Abstract interface for the identity collaborator."""

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create a user. `metadata` is stored as auxiliary profile data.

        Returns the identity service's user object.
        Raises IdentityServiceError.
        """
        ...

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Check credentials; returns the user object. Raises IdentityServiceError."""
        ...

    @abstractmethod
    async def verify_otp(self, email: str, token: str, type: str = "signup") -> Dict[str, Any]:
        """Confirm a one-time code for the given flow. Raises IdentityServiceError."""
        ...


class SupabaseIdentityProvider(IdentityProvider):
    """
    Supabase Auth client.

    Endpoints used (relative to <supabase_url>/auth/v1):
        POST /signup                      {email, password, data}
        POST /token?grant_type=password   {email, password}
        POST /verify                      {type, email, token}

    The service role key is sent both as `apikey` and as bearer token.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str):
        self.client = client
        self.auth_url = f"{base_url.rstrip('/')}/auth/v1"
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }

    async def sign_up(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"email": email, "password": password}
        if metadata:
            payload["data"] = metadata
        body = await self._post("/signup", payload)
        # With email confirmation on, signup returns the user itself;
        # with it off, a session wrapping the user.
        return body.get("user") or body

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        body = await self._post(
            "/token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
        )
        user = body.get("user")
        if not isinstance(user, dict):
            raise IdentityServiceError(
                message="Identity service returned no user",
                context={"operation": "/token"},
            )
        return user

    async def verify_otp(self, email: str, token: str, type: str = "signup") -> Dict[str, Any]:
        body = await self._post("/verify", {"type": type, "email": email, "token": token})
        return body.get("user") or body

    async def _post(
        self,
        path: str,
        payload: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        POST to the auth API and return the decoded JSON body.

        Error responses become IdentityServiceError(rejected=True) carrying
        the service's message; transport failures become rejected=False.
        """
        url = f"{self.auth_url}{path}"
        try:
            response = await self.client.post(url, json=payload, params=params, headers=self.headers)
        except httpx.HTTPError as e:
            logger.error("Identity service unreachable (%s): %s", path, str(e))
            raise IdentityServiceError(
                message="Identity service is unavailable",
                rejected=False,
                context={"operation": path, "error_type": type(e).__name__},
            )

        if response.is_error:
            message = _error_message(response)
            logger.info(
                "Identity service rejected %s with %d: %s", path, response.status_code, message
            )
            raise IdentityServiceError(
                message=message,
                rejected=True,
                status_code=response.status_code,
                context={"operation": path},
            )

        try:
            body = response.json()
        except ValueError:
            raise IdentityServiceError(
                message="Identity service returned an invalid response",
                rejected=False,
                status_code=response.status_code,
                context={"operation": path},
            )
        return body if isinstance(body, dict) else {}


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Identity service error ({response.status_code})"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Identity service error ({response.status_code})"
