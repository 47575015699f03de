"""OAuth 2.0 token lifecycle for Jira Cloud.

TokenManager covers the authorization-code flow, the refresh-token flow and
restoring a credential saved by an earlier session. Refresh is never
automatic: callers decide when a token needs replacing, e.g. after a
``RequestError`` with status 401 or when ``Credential.is_expired()``.

Example:
    manager = TokenManager(client_id, client_secret, redirect_uri)
    url = manager.build_authorization_url(state="xyz")
    # ... user authorizes, the redirect delivers ?code=...
    credential = manager.exchange_code_for_tokens(code)
    store.save(credential)
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
from oauthlib.oauth2 import WebApplicationClient
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from jiracloud.config import DEFAULT_SCOPES, Settings
from jiracloud.credentials import (
    AuthorizationRequest,
    AuthState,
    Credential,
    ResourceOwnerProfile,
    expiry_timestamp,
)
from jiracloud.exceptions import (
    AuthError,
    IdentityProviderError,
    NetworkError,
    NotAuthenticatedError,
)
from jiracloud.logging import (
    audit_authorization_started,
    audit_token_exchange_failed,
    audit_token_exchanged,
    audit_token_refresh,
    audit_token_refresh_failed,
    logger,
)
from jiracloud.provider import TOKEN_URL, AtlassianProvider, OAuthProvider
from jiracloud.transport import DEFAULT_TIMEOUT, build_http_client

DEFAULT_STATE = "OPTIONAL_CUSTOM_CONFIGURED_STATE"


class TokenManager:
    """Owns the OAuth 2.0 credential for one Jira Cloud site.

    Args:
        client_id: OAuth app client id.
        client_secret: OAuth app client secret.
        redirect_uri: Callback URL registered for the app.
        scopes: Scopes requested when none are passed to
            ``build_authorization_url``.
        provider: Provider client. Defaults to ``AtlassianProvider``.
        http_client: Client used for the refresh grant (and for the default
            provider). One is created when omitted.
        timeout: Request timeout for clients created here.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: Iterable[str] = DEFAULT_SCOPES,
        provider: OAuthProvider | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._default_scopes = list(dict.fromkeys(scopes))
        self._request = AuthorizationRequest(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scopes=frozenset(self._default_scopes),
        )
        self._owns_client = http_client is None
        self._http = http_client or build_http_client(timeout)
        self._owns_provider = provider is None
        self._provider = provider or AtlassianProvider(
            client_id, client_secret, redirect_uri, http_client=self._http
        )

        self._lock = threading.Lock()
        self._credential: Credential | None = None
        self._refreshing = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: OAuthProvider | None = None,
        http_client: httpx.Client | None = None,
    ) -> TokenManager:
        """Create a manager from ``Settings``."""
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            scopes=settings.get_scopes() or DEFAULT_SCOPES,
            provider=provider,
            http_client=http_client,
            timeout=settings.http_timeout_seconds,
        )

    # -- State --

    @property
    def authorization_request(self) -> AuthorizationRequest:
        return self._request

    @property
    def credential(self) -> Credential | None:
        return self._credential

    @property
    def state(self) -> AuthState:
        """Current position in the authentication lifecycle."""
        if self._refreshing:
            return AuthState.REFRESHING
        if self._credential is None or not self._credential.access_token:
            return AuthState.UNAUTHENTICATED
        return AuthState.AUTHENTICATED

    @property
    def refresh_token_url(self) -> str:
        return TOKEN_URL

    # -- Authorization-code flow --

    def build_authorization_url(
        self,
        state: str = DEFAULT_STATE,
        scopes: Iterable[str] | None = None,
    ) -> str:
        """Build the URL the user opens to authorize the app.

        The state is remembered on ``authorization_request`` so the redirect
        handler can compare it; the comparison itself is up to the caller.

        Args:
            state: Opaque value echoed back on the redirect.
            scopes: Scopes to request. Defaults to the manager's scopes.

        Returns:
            The authorization URL.
        """
        requested = list(dict.fromkeys(scopes)) if scopes is not None else self._default_scopes
        self._request.state = state
        url = self._provider.get_authorization_url(state, requested)
        audit_authorization_started(state, requested)
        return url

    def exchange_code_for_tokens(self, code: str) -> Credential:
        """Exchange an authorization code for tokens and resolve the cloud id.

        Args:
            code: The ``code`` query parameter delivered to the redirect URI.

        Returns:
            The new Credential, which also becomes the current one.

        Raises:
            IdentityProviderError: If the grant or the identity lookup is
                rejected. Nothing is stored in that case.
        """
        try:
            token = self._provider.get_access_token(code)
            access_token = token.get("access_token")
            if not access_token:
                raise IdentityProviderError("Token response has no access_token")
            owner = self._provider.get_resource_owner(access_token)
            try:
                cloud_id = owner.cloud_id
            except ValueError as e:
                raise IdentityProviderError(str(e)) from e
        except IdentityProviderError as e:
            audit_token_exchange_failed(str(e))
            raise

        credential = Credential(
            cloud_id=cloud_id,
            access_token=access_token,
            refresh_token=token.get("refresh_token") or "",
            expires_at=_token_expiry(token),
        )
        with self._lock:
            self._credential = credential
        audit_token_exchanged(cloud_id)
        return credential

    # -- Refresh-token flow --

    def refresh_tokens(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        refresh_token: str | None = None,
    ) -> Credential:
        """Trade a refresh token for a new access/refresh token pair.

        Omitted arguments fall back to the manager's client credentials and
        the stored refresh token. The cloud id of the current credential is
        carried over because the token endpoint does not report it.

        Returns:
            The new Credential, which replaces the current one.

        Raises:
            AuthError: On any non-200 response or an unusable token
                response. The current credential is left untouched.
            NotAuthenticatedError: If no refresh token is given or stored.
        """
        current = self._credential
        refresh_token = refresh_token or (current.refresh_token if current else "")
        if not refresh_token:
            raise NotAuthenticatedError("No refresh token available")

        oauth = WebApplicationClient(client_id or self._request.client_id)
        body = oauth.prepare_refresh_body(
            refresh_token=refresh_token,
            client_id=oauth.client_id,
            client_secret=client_secret or self._request.client_secret,
        )

        self._refreshing = True
        try:
            try:
                response = self._http.post(
                    self.refresh_token_url,
                    content=body,
                    headers={
                        "Accept": "application/json",
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                )
            except httpx.RequestError as e:
                raise NetworkError(f"Network error: {e}") from e

            if response.status_code != 200:
                audit_token_refresh_failed(response.status_code)
                raise AuthError(
                    "Cannot get a new access token",
                    status_code=response.status_code,
                    body=response.text,
                )

            try:
                result = oauth.parse_request_body_response(response.text)
            except (OAuth2Error, ValueError, TypeError) as e:
                audit_token_refresh_failed(response.status_code)
                raise AuthError(
                    "Malformed token response",
                    status_code=response.status_code,
                    body=response.text,
                ) from e

            credential = Credential(
                cloud_id=current.cloud_id if current else "",
                access_token=result["access_token"],
                refresh_token=result.get("refresh_token") or refresh_token,
                expires_at=_token_expiry(result),
            )
            with self._lock:
                self._credential = credential
        finally:
            self._refreshing = False

        audit_token_refresh(credential.cloud_id or None)
        return credential

    # -- Restoring saved credentials --

    def restore_credential(self, parameters: Mapping[str, Any]) -> None:
        """Restore a credential persisted by an earlier session.

        Args:
            parameters: ``{cloudId?, accessToken, refreshToken, expires}``.
                When cloudId is missing or empty the current one is kept.

        Raises:
            KeyError: If ``accessToken`` is missing.
        """
        with self._lock:
            previous_cloud_id = self._credential.cloud_id if self._credential else ""
            self._credential = Credential.from_dict(dict(parameters), cloud_id=previous_cloud_id)
        logger.debug("Credential restored")

    # -- Accessors --

    def current_auth_params(self) -> dict[str, str]:
        """Return ``{"cloudId", "accessToken"}`` for the request executor.

        Raises:
            NotAuthenticatedError: If no token has been established.
        """
        credential = self._credential
        if credential is None or not credential.access_token:
            raise NotAuthenticatedError()
        return credential.auth_params()

    def current_owner(self) -> ResourceOwnerProfile:
        """Fetch the profile of the authenticated user (never cached)."""
        access_token = self.current_auth_params()["accessToken"]
        return self._provider.get_resource_owner(access_token)

    def close(self) -> None:
        """Close clients created by this manager."""
        if self._owns_provider:
            self._provider.close()
        if self._owns_client:
            self._http.close()


def _token_expiry(token: Mapping[str, Any]) -> float:
    """Expiry timestamp from a token response (oauthlib adds ``expires_at``)."""
    if token.get("expires_at") is not None:
        return float(token["expires_at"])
    if token.get("expires_in") is not None:
        return time.time() + float(token["expires_in"])
    return 0.0
