"""Custom exceptions for jiracloud."""

from __future__ import annotations


class JiraError(Exception):
    """Base exception for all jiracloud errors."""

    pass


class NotAuthenticatedError(JiraError):
    """Raised when an operation needs a credential and none is established."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No access token available. Exchange an authorization code "
            "or restore a saved credential first."
        )


class IdentityProviderError(JiraError):
    """Raised when the authorization-code grant or identity lookup is rejected."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class AuthError(JiraError):
    """Raised when the refresh-token grant returns a non-200 response."""

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"{message} (HTTP {status_code})")


class RequestError(JiraError):
    """Raised when an authenticated API call returns a non-200 response.

    The raw response body is kept verbatim so callers can inspect Jira's
    ``errorMessages`` themselves.
    """

    def __init__(self, body: str, status_code: int) -> None:
        self.body = body
        self.status_code = status_code
        super().__init__(f"Jira API error {status_code}: {body}")


class NetworkError(JiraError):
    """Raised when the HTTP transport fails before a response is received."""

    pass
