"""File persistence for restorable credentials.

Credentials are stored in ~/.config/jiracloud/credentials.json with secure
file permissions (readable only by owner), in the same
``{cloudId, accessToken, refreshToken, expires}`` shape that
``TokenManager.restore_credential`` accepts.
"""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from typing import Any

from loguru import logger

from jiracloud.credentials import Credential


class CredentialStore:
    """Reads and writes one credential file."""

    DEFAULT_PATH = Path.home() / ".config" / "jiracloud" / "credentials.json"

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path else self.DEFAULT_PATH

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any] | None:
        """Load the saved credential, or None if absent or unreadable."""
        if not self._path.exists():
            return None

        try:
            data = json.loads(self._path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable credential file {}: {}", self._path, e)
            return None

        if not isinstance(data, dict) or not data.get("accessToken"):
            logger.warning("Ignoring credential file {} without accessToken", self._path)
            return None
        return data

    def save(self, credential: Credential) -> None:
        """Save the credential with owner-only permissions."""
        # Only a directory created here is narrowed to 0700
        if not self._path.parent.exists():
            self._path.parent.mkdir(parents=True)
            os.chmod(self._path.parent, stat.S_IRWXU)

        # Write to temp file, set permissions, then rename atomically
        temp_path = self._path.with_suffix(".tmp")
        temp_path.write_text(json.dumps(credential.to_dict(), indent=2))
        os.chmod(temp_path, stat.S_IRUSR | stat.S_IWUSR)  # 0600
        temp_path.replace(self._path)
        logger.debug("Credential saved to {}", self._path)

    def clear(self) -> None:
        """Delete the saved credential if present."""
        self._path.unlink(missing_ok=True)
