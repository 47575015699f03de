"""Tests for logging configuration."""

import json

import pytest

from jiracloud.logging import (
    audit_authorization_started,
    audit_token_refresh_failed,
    logger,
    setup_logging,
)


def test_library_is_silent_until_configured(capsys: pytest.CaptureFixture[str]) -> None:
    audit_token_refresh_failed(401)
    assert capsys.readouterr().err == ""


def test_json_logs(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(json_logs=True, log_level="INFO")

    audit_token_refresh_failed(401)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    entry = json.loads(line)
    assert entry["level"] == "WARNING"
    assert entry["message"] == "Token refresh failed"
    assert entry["audit_event"] == "token_refresh_failed"
    assert entry["status_code"] == 401


def test_level_filters(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(json_logs=True, log_level="ERROR")
    logger.warning("not shown")
    assert capsys.readouterr().err == ""


def test_authorization_audit_omits_state_value(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(json_logs=True, log_level="INFO")

    audit_authorization_started("csrf-secret-value", ["read:jira-work"])

    line = capsys.readouterr().err.strip().splitlines()[-1]
    entry = json.loads(line)
    assert entry["audit_event"] == "authorization_started"
    assert entry["has_state"] is True
    assert "csrf" not in line
