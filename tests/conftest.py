"""Shared test fixtures for jiracloud."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
from loguru import logger

from jiracloud.auth import TokenManager
from jiracloud.config import Settings
from jiracloud.transport import AuthenticatedRequestExecutor
from tests.fakes import CLOUD_ID, HOST, FakeProvider


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    yield
    logger.remove()
    logger.disable("jiracloud")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        host=HOST,
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="https://app.example.test/callback",
    )


@pytest.fixture
def http_client() -> Iterator[httpx.Client]:
    client = httpx.Client()
    yield client
    client.close()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def manager(provider: FakeProvider, http_client: httpx.Client) -> TokenManager:
    return TokenManager(
        "client-id",
        "client-secret",
        "https://app.example.test/callback",
        provider=provider,
        http_client=http_client,
    )


@pytest.fixture
def authenticated_manager(manager: TokenManager) -> TokenManager:
    manager.restore_credential(
        {
            "cloudId": CLOUD_ID,
            "accessToken": "access-1",
            "refreshToken": "refresh-1",
            "expires": 3600,
        }
    )
    return manager


@pytest.fixture
def executor(
    authenticated_manager: TokenManager, http_client: httpx.Client
) -> AuthenticatedRequestExecutor:
    return AuthenticatedRequestExecutor(authenticated_manager, host=HOST, http_client=http_client)
