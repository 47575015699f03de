"""OAuth 2.0 provider capability for Atlassian (3LO).

TokenManager is composed with an ``OAuthProvider`` instead of inheriting
from one, so tests can substitute an in-memory fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

import httpx
from loguru import logger
from oauthlib.oauth2 import WebApplicationClient
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from jiracloud.credentials import ResourceOwnerProfile
from jiracloud.exceptions import IdentityProviderError, NetworkError
from jiracloud.transport import DEFAULT_TIMEOUT, build_http_client

AUTHORIZE_URL = "https://auth.atlassian.com/authorize"
TOKEN_URL = "https://auth.atlassian.com/oauth/token"
AUDIENCE = "api.atlassian.com"
API_BASE = "https://api.atlassian.com"
ACCESSIBLE_RESOURCES_URL = f"{API_BASE}/oauth/token/accessible-resources"


class OAuthProvider(ABC):
    """Abstract OAuth 2.0 provider client."""

    @abstractmethod
    def get_authorization_url(self, state: str, scopes: Iterable[str]) -> str:
        """Build the URL the user visits to grant access. No network call."""
        ...

    @abstractmethod
    def get_access_token(self, code: str) -> dict[str, Any]:
        """Run the authorization-code grant.

        Returns:
            Token response with at least ``access_token``; ``refresh_token``
            and ``expires_at`` when the provider sends them.

        Raises:
            IdentityProviderError: If the provider rejects the grant.
        """
        ...

    @abstractmethod
    def get_resource_owner(self, access_token: str) -> ResourceOwnerProfile:
        """Fetch the profile of the user the token belongs to.

        Raises:
            IdentityProviderError: If the identity lookup is rejected.
        """
        ...

    def close(self) -> None:
        """Close any open connections."""
        return None


class AtlassianProvider(OAuthProvider):
    """Production provider talking to auth.atlassian.com and api.atlassian.com."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._oauth = WebApplicationClient(client_id)
        self._owns_client = http_client is None
        self._http = http_client or build_http_client(timeout)

    def get_authorization_url(self, state: str, scopes: Iterable[str]) -> str:
        return self._oauth.prepare_request_uri(
            AUTHORIZE_URL,
            redirect_uri=self._redirect_uri,
            scope=list(dict.fromkeys(scopes)),
            state=state,
            audience=AUDIENCE,
            prompt="consent",
        )

    def get_access_token(self, code: str) -> dict[str, Any]:
        body = self._oauth.prepare_request_body(
            code=code,
            redirect_uri=self._redirect_uri,
            client_secret=self._client_secret,
            include_client_id=True,
        )
        response = self._request(
            "POST",
            TOKEN_URL,
            content=body,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/x-www-form-urlencoded",
            },
        )
        if response.status_code != 200:
            raise IdentityProviderError(
                f"Authorization code grant rejected: {_error_description(response)}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            token = self._oauth.parse_request_body_response(response.text)
        except OAuth2Error as e:
            raise IdentityProviderError(
                f"Invalid token response: {e.description or e.error}",
                status_code=response.status_code,
                body=response.text,
            ) from e
        return dict(token)

    def get_resource_owner(self, access_token: str) -> ResourceOwnerProfile:
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {access_token}",
        }

        resources = self._get_json(ACCESSIBLE_RESOURCES_URL, headers)
        if not isinstance(resources, list) or not resources:
            raise IdentityProviderError("Token grants access to no Jira Cloud site")
        site_id = resources[0].get("id")
        if not site_id:
            raise IdentityProviderError("Accessible resource has no id")
        if len(resources) > 1:
            logger.debug("Token grants {} sites, using the first", len(resources))

        profile = self._get_json(f"{API_BASE}/ex/jira/{site_id}/rest/api/2/myself", headers)
        if not isinstance(profile, dict):
            raise IdentityProviderError("Resource owner response is not an object")
        return ResourceOwnerProfile(raw=profile)

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    # -- HTTP helpers --

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._http.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}") from e

    def _get_json(self, url: str, headers: dict[str, str]) -> Any:
        response = self._request("GET", url, headers=headers)
        if response.status_code != 200:
            raise IdentityProviderError(
                f"Identity lookup rejected: {_error_description(response)}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as e:
            raise IdentityProviderError(
                "Identity response is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e


def _error_description(response: httpx.Response) -> str:
    """Pull a readable reason out of an OAuth or REST error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for key in ("error_description", "error", "message"):
            if data.get(key):
                return str(data[key])
    return response.text
