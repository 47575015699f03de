"""Transport layer for the Jira Cloud REST API.

Defines the authenticated request executor shared by every resource service
and the httpx client factory used by the OAuth provider.
"""

from __future__ import annotations

import json
import ssl
from typing import TYPE_CHECKING, Any, Protocol

import certifi
import httpx
from loguru import logger

from jiracloud.config import DEFAULT_HOST
from jiracloud.exceptions import NetworkError, RequestError

if TYPE_CHECKING:
    from collections.abc import Mapping

API_PATH = "rest/api/2/"
AGILE_API_PATH = "rest/agile/1.0/"
DEFAULT_TIMEOUT = 30.0

# Methods whose parameters travel in the query string rather than the body
_QUERY_METHODS = frozenset({"GET", "DELETE", "HEAD"})


class AuthParamsSource(Protocol):
    """Anything that can hand out the current cloud id and access token."""

    def current_auth_params(self) -> dict[str, str]: ...


def build_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.Client:
    """Create an ``httpx.Client`` verifying TLS against certifi's bundle."""
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    return httpx.Client(timeout=timeout, verify=ssl_context)


class AuthenticatedRequestExecutor:
    """Issues bearer-authenticated calls scoped to one Jira Cloud site.

    Args:
        credentials: Source of ``{cloudId, accessToken}``, normally a
            TokenManager. Consulted on every call, so a refresh is picked up
            without rebuilding the executor.
        host: Base URL the cloud id is appended to.
        http_client: Client to send requests with. One is created when omitted.
        timeout: Request timeout for a client created here.
    """

    def __init__(
        self,
        credentials: AuthParamsSource,
        host: str = DEFAULT_HOST,
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._credentials = credentials
        self._host = host.rstrip("/") + "/"
        self._owns_client = http_client is None
        self._client = http_client or build_http_client(timeout)

    @property
    def host(self) -> str:
        return self._host

    def build_resource_uri(
        self, cloud_id: str, resource: str, api_path: str = API_PATH
    ) -> str:
        """Return ``<host><cloud_id>/<api_path><resource>``."""
        return f"{self._host}{cloud_id}/{api_path}{resource.lstrip('/')}"

    def send(
        self,
        method: str,
        resource: str,
        parameters: Mapping[str, Any] | None = None,
        *,
        api_path: str = API_PATH,
    ) -> Any:
        """Send a request to a Jira resource and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, ...).
            resource: Path below the API prefix, e.g. ``"issue/TEST-1"``.
            parameters: Query parameters for GET/DELETE/HEAD, JSON body otherwise.
            api_path: API prefix, ``rest/api/2/`` unless targeting the Agile API.

        Returns:
            The decoded JSON value, or None if a 200 body is not valid JSON.

        Raises:
            NotAuthenticatedError: If no access token is established. No
                request is made in that case.
            RequestError: On any non-200 response.
            NetworkError: If the request could not be sent.
        """
        auth = self._credentials.current_auth_params()
        method = method.upper()
        url = self.build_resource_uri(auth["cloudId"], resource, api_path)
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {auth['accessToken']}",
        }

        request_kwargs: dict[str, Any] = {}
        if parameters:
            if method in _QUERY_METHODS:
                request_kwargs["params"] = dict(parameters)
            else:
                request_kwargs["json"] = dict(parameters)

        logger.debug("{} {}", method, url)
        try:
            response = self._client.request(method, url, headers=headers, **request_kwargs)
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}") from e

        if response.status_code != 200:
            raise RequestError(response.text, response.status_code)

        return decode_json(response.text)

    def close(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            self._client.close()


def decode_json(body: str) -> Any:
    """Decode a response body, logging and returning None on malformed JSON."""
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("Response cannot be decoded from json\nException: {}", e)
        return None
