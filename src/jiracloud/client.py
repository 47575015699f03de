"""High-level client wiring authentication, transport and services together."""

from __future__ import annotations

from types import TracebackType

import httpx

from jiracloud.auth import TokenManager
from jiracloud.config import Settings, get_settings
from jiracloud.provider import OAuthProvider
from jiracloud.services import BoardService, LabelService
from jiracloud.transport import AuthenticatedRequestExecutor, build_http_client


class JiraClient:
    """Jira Cloud client sharing one HTTP connection pool.

    Args:
        settings: Configuration. Defaults to ``get_settings()``.
        provider: OAuth provider override, mainly for tests.
        http_client: HTTP client override. Closed by the caller if given.

    Example:
        with JiraClient() as jira:
            jira.auth.restore_credential(store.load())
            issue = jira.requests.send("GET", "issue/TEST-1")
            labels = jira.labels.get_all()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        provider: OAuthProvider | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_client = http_client is None
        self._http = http_client or build_http_client(self.settings.http_timeout_seconds)

        self.auth = TokenManager.from_settings(
            self.settings, provider=provider, http_client=self._http
        )
        self.requests = AuthenticatedRequestExecutor(
            self.auth, host=self.settings.host, http_client=self._http
        )
        self.labels = LabelService(self.requests)
        self.boards = BoardService(self.requests)

    def close(self) -> None:
        self.auth.close()
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> JiraClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
