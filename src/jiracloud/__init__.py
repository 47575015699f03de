"""jiracloud - Jira Cloud REST client with Atlassian OAuth 2.0 (3LO).

Example:
    from jiracloud import JiraClient

    with JiraClient() as jira:
        print(jira.auth.build_authorization_url(state="xyz"))
        jira.auth.exchange_code_for_tokens(code)
        issue = jira.requests.send("GET", "issue/TEST-1")
"""

__version__ = "0.1.0"

from jiracloud.auth import TokenManager
from jiracloud.client import JiraClient
from jiracloud.config import Settings, get_settings
from jiracloud.credentials import (
    AuthorizationRequest,
    AuthState,
    Credential,
    ResourceOwnerProfile,
)
from jiracloud.exceptions import (
    AuthError,
    IdentityProviderError,
    JiraError,
    NetworkError,
    NotAuthenticatedError,
    RequestError,
)
from jiracloud.provider import AtlassianProvider, OAuthProvider
from jiracloud.services import Board, BoardService, LabelService, Page
from jiracloud.store import CredentialStore
from jiracloud.transport import AuthenticatedRequestExecutor

__all__ = [
    "AtlassianProvider",
    "AuthError",
    "AuthState",
    "AuthenticatedRequestExecutor",
    "AuthorizationRequest",
    "Board",
    "BoardService",
    "Credential",
    "CredentialStore",
    "IdentityProviderError",
    "JiraClient",
    "JiraError",
    "LabelService",
    "NetworkError",
    "NotAuthenticatedError",
    "OAuthProvider",
    "Page",
    "RequestError",
    "ResourceOwnerProfile",
    "Settings",
    "TokenManager",
    "__version__",
    "get_settings",
]
