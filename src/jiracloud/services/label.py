"""Labels."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jiracloud.services.base import JiraService, Page


class LabelService(JiraService):
    uri = "label"

    def get_all(self, params: Mapping[str, Any] | None = None) -> Page | None:
        """List labels, e.g. ``get_all({"startAt": 0, "maxResults": 100})``."""
        return self._map(self._get(self.uri, params), Page.from_json)
