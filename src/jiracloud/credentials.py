"""Credential and identity data structures for Jira Cloud OAuth 2.0 (3LO)."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlparse

# league/oauth2-client convention: an "expires" value larger than ten years
# of seconds is an absolute timestamp, anything smaller is a lifetime.
EXPIRATION_TIMESTAMP_THRESHOLD = 315_360_000


class AuthState(Enum):
    """Authentication lifecycle of a TokenManager."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


def expiry_timestamp(expires: float | int | None, now: float | None = None) -> float:
    """Normalize an ``expires`` value to a unix timestamp."""
    if expires is None:
        return 0.0
    expires = float(expires)
    if expires > EXPIRATION_TIMESTAMP_THRESHOLD:
        return expires
    return (time.time() if now is None else now) + expires


@dataclass(frozen=True)
class Credential:
    """The full credential set for one authorized Jira Cloud site.

    Attributes:
        cloud_id: Site identifier every REST call is scoped to.
        access_token: Bearer token for API calls.
        refresh_token: Token used to obtain a new access token.
        expires_at: Unix timestamp when the access token expires.
    """

    cloud_id: str
    access_token: str
    refresh_token: str
    expires_at: float

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check if the access token is expired or about to expire."""
        return time.time() >= self.expires_at - buffer_seconds

    def expires_in_seconds(self) -> int:
        """Return seconds until token expires."""
        return max(0, int(self.expires_at - time.time()))

    def auth_params(self) -> dict[str, str]:
        """Return the ``{cloudId, accessToken}`` pair the request executor needs."""
        return {"cloudId": self.cloud_id, "accessToken": self.access_token}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted ``{cloudId, accessToken, refreshToken, expires}`` shape."""
        return {
            "cloudId": self.cloud_id,
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expires": int(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], cloud_id: str = "") -> Credential:
        """Create Credential from the persisted shape.

        Args:
            data: Mapping with accessToken, refreshToken, expires and
                optionally cloudId.
            cloud_id: Fallback when ``data`` carries no cloudId.
        """
        return cls(
            cloud_id=data.get("cloudId") or cloud_id,
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken") or "",
            expires_at=expiry_timestamp(data.get("expires")),
        )


@dataclass
class AuthorizationRequest:
    """OAuth client registration plus the state of the current attempt."""

    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: frozenset[str] = field(default_factory=frozenset)
    state: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name != "state" and name in self.__dict__:
            raise AttributeError(f"AuthorizationRequest.{name} is read-only")
        super().__setattr__(name, value)


@dataclass(frozen=True)
class ResourceOwnerProfile:
    """Identity of the user who authorized the app.

    Wraps the ``myself`` payload; only ``self`` is relied upon.
    """

    raw: dict[str, Any]

    @property
    def self_url(self) -> str:
        return str(self.raw.get("self", ""))

    @property
    def account_id(self) -> str:
        return str(self.raw.get("accountId", ""))

    @property
    def display_name(self) -> str:
        return str(self.raw.get("displayName", ""))

    @property
    def cloud_id(self) -> str:
        """Cloud id taken from the ``self`` URL path.

        ``https://api.atlassian.com/ex/jira/<cloudId>/rest/api/2/myself``
        splits into ``['', 'ex', 'jira', '<cloudId>', ...]``.

        Raises:
            ValueError: If the path has fewer than four segments.
        """
        segments = urlparse(self.self_url).path.split("/")
        if len(segments) < 4 or not segments[3]:
            raise ValueError(f"Cannot derive cloud id from profile URL: {self.self_url!r}")
        return segments[3]

    def to_dict(self) -> dict[str, Any]:
        return dict(self.raw)
