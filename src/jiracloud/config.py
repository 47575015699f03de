"""Client configuration using pydantic-settings.

Values are read from ``JIRA_*`` environment variables or a local ``.env``
file. Nothing in the library reads the environment directly; components
receive the values they need at construction.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOST = "https://api.atlassian.com/ex/jira/"
DEFAULT_SCOPES = ["read:jira-user", "read:jira-work"]


class Settings(BaseSettings):
    """Settings for the Jira Cloud client.

    Environment variables:
    - JIRA_HOST: Base URL the cloud id is appended to
    - JIRA_CLIENT_ID / JIRA_CLIENT_SECRET: OAuth 2.0 (3LO) app credentials
    - JIRA_REDIRECT_URI: Callback URL registered for the app
    - JIRA_SCOPES: Comma-separated scopes, e.g. "read:jira-work,write:jira-work"
    """

    model_config = SettingsConfigDict(
        env_prefix="JIRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = DEFAULT_HOST
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://localhost:8080/callback"
    scopes: str = ",".join(DEFAULT_SCOPES)

    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # Logging
    log_level: str = "WARNING"
    json_logs: bool = False

    def get_scopes(self) -> list[str]:
        """Get the configured scopes as a list."""
        return [s.strip() for s in self.scopes.split(",") if s.strip()]

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Require an http(s) URL and normalize the trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("host must be an http(s) URL")
        return v.rstrip("/") + "/"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one loguru knows."""
        level = v.upper()
        allowed = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"log_level must be one of: {sorted(allowed)}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
