"""Tests for the command-line interface."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
import respx

from jiracloud.__main__ import main, parse_params
from jiracloud.client import JiraClient
from jiracloud.config import Settings
from jiracloud.credentials import Credential
from jiracloud.provider import TOKEN_URL
from jiracloud.store import CredentialStore
from tests.fakes import CLOUD_ID, HOST, FakeProvider


@pytest.fixture
def client(settings: Settings, provider: FakeProvider, http_client: httpx.Client) -> Iterator[JiraClient]:
    jira = JiraClient(settings, provider=provider, http_client=http_client)
    yield jira
    jira.close()


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "credentials.json"


@pytest.fixture
def saved(store_path: Path) -> CredentialStore:
    store = CredentialStore(store_path)
    store.save(Credential(CLOUD_ID, "access-1", "refresh-1", expires_at=4102444800.0))
    return store


def test_parse_params() -> None:
    assert parse_params(["a=1", "b=x=y"]) == {"a": "1", "b": "x=y"}
    assert parse_params(None) == {}


def test_parse_params_rejects_bare_key() -> None:
    with pytest.raises(ValueError):
        parse_params(["oops"])


def test_authorize(client: JiraClient, store_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        ["--store", str(store_path), "authorize", "--state", "s1", "--scope", "read:jira-work"],
        client=client,
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "state=s1" in out
    assert "scope=read%3Ajira-work" in out


def test_exchange_saves_credential(
    client: JiraClient, store_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--store", str(store_path), "exchange", "good-code"], client=client)

    assert code == 0
    assert f"Authenticated for cloud {CLOUD_ID}" in capsys.readouterr().out
    saved = json.loads(store_path.read_text())
    assert saved["cloudId"] == CLOUD_ID
    assert saved["accessToken"] == "access-1"


def test_exchange_rejected(
    client: JiraClient, store_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--store", str(store_path), "exchange", "bad-code"], client=client)
    assert code == 1
    assert "Error:" in capsys.readouterr().err
    assert not store_path.exists()


def test_request_without_saved_credential(
    client: JiraClient, store_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--store", str(store_path), "request", "GET", "issue/TEST-1"], client=client)
    assert code == 1
    assert "No saved credential" in capsys.readouterr().err


@respx.mock
def test_request(
    client: JiraClient, saved: CredentialStore, capsys: pytest.CaptureFixture[str]
) -> None:
    route = respx.get(f"{HOST}{CLOUD_ID}/rest/api/2/issue/TEST-1").mock(
        return_value=httpx.Response(200, json={"key": "TEST-1"})
    )

    code = main(
        ["--store", str(saved.path), "request", "GET", "issue/TEST-1", "--param", "fields=summary"],
        client=client,
    )

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"key": "TEST-1"}
    assert route.calls.last.request.url.params["fields"] == "summary"


@respx.mock
def test_request_error_status(
    client: JiraClient, saved: CredentialStore, capsys: pytest.CaptureFixture[str]
) -> None:
    respx.get(f"{HOST}{CLOUD_ID}/rest/api/2/issue/NOPE-1").mock(
        return_value=httpx.Response(404, text="missing")
    )
    code = main(["--store", str(saved.path), "request", "GET", "issue/NOPE-1"], client=client)
    assert code == 1
    assert "404" in capsys.readouterr().err


@respx.mock
def test_refresh_updates_store(client: JiraClient, saved: CredentialStore) -> None:
    respx.post(TOKEN_URL).mock(
        return_value=httpx.Response(
            200, json={"access_token": "access-2", "refresh_token": "refresh-2", "expires_in": 3600}
        )
    )

    code = main(["--store", str(saved.path), "refresh"], client=client)

    assert code == 0
    data = saved.load()
    assert data is not None
    assert data["accessToken"] == "access-2"
    assert data["refreshToken"] == "refresh-2"
    assert data["cloudId"] == CLOUD_ID


def test_whoami(
    client: JiraClient, saved: CredentialStore, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--store", str(saved.path), "whoami"], client=client)
    assert code == 0
    out = capsys.readouterr().out
    assert "Mia Krystof" in out
    assert CLOUD_ID in out


@respx.mock
def test_labels(
    client: JiraClient, saved: CredentialStore, capsys: pytest.CaptureFixture[str]
) -> None:
    respx.get(f"{HOST}{CLOUD_ID}/rest/api/2/label").mock(
        return_value=httpx.Response(200, json={"isLast": True, "values": ["alpha", "beta"]})
    )
    code = main(["--store", str(saved.path), "labels"], client=client)
    assert code == 0
    assert capsys.readouterr().out.split() == ["alpha", "beta"]


@respx.mock
def test_board(
    client: JiraClient, saved: CredentialStore, capsys: pytest.CaptureFixture[str]
) -> None:
    respx.get(f"{HOST}{CLOUD_ID}/rest/agile/1.0/board/7").mock(
        return_value=httpx.Response(200, json={"id": 7, "name": "Team", "type": "kanban"})
    )
    code = main(["--store", str(saved.path), "board", "7"], client=client)
    assert code == 0
    assert capsys.readouterr().out.strip() == "7\tTeam\tkanban"
