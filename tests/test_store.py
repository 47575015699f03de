"""Tests for CredentialStore."""

import json
import os
import stat
import sys
from pathlib import Path

import pytest

from jiracloud.credentials import Credential
from jiracloud.store import CredentialStore


@pytest.fixture
def store(tmp_path: Path) -> CredentialStore:
    return CredentialStore(tmp_path / "jiracloud" / "credentials.json")


def test_load_missing(store: CredentialStore) -> None:
    assert store.load() is None


def test_save_then_load(store: CredentialStore) -> None:
    store.save(Credential("ABC123", "a", "r", expires_at=1234567890.0))
    assert store.load() == {
        "cloudId": "ABC123",
        "accessToken": "a",
        "refreshToken": "r",
        "expires": 1234567890,
    }


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_save_uses_owner_only_permissions(store: CredentialStore) -> None:
    store.save(Credential("ABC123", "a", "r", expires_at=0))
    assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600
    assert stat.S_IMODE(os.stat(store.path.parent).st_mode) == 0o700
    assert not store.path.with_suffix(".tmp").exists()


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_save_leaves_existing_directory_mode(tmp_path: Path) -> None:
    shared = tmp_path / "shared"
    shared.mkdir()
    os.chmod(shared, 0o755)

    store = CredentialStore(shared / "credentials.json")
    store.save(Credential("ABC123", "a", "r", expires_at=0))

    assert stat.S_IMODE(os.stat(shared).st_mode) == 0o755
    assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600


def test_corrupt_file_is_ignored(store: CredentialStore) -> None:
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{broken")
    assert store.load() is None


def test_file_without_access_token_is_ignored(store: CredentialStore) -> None:
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps({"cloudId": "ABC123"}))
    assert store.load() is None


def test_clear(store: CredentialStore) -> None:
    store.save(Credential("ABC123", "a", "r", expires_at=0))
    store.clear()
    assert store.load() is None
    store.clear()
