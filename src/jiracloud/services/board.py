"""Agile boards (``/rest/agile/1.0/board``)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from jiracloud.services.base import Board, JiraService, Page
from jiracloud.transport import AGILE_API_PATH


class BoardService(JiraService):
    api_path = AGILE_API_PATH
    uri = "board"

    def get(
        self, board_id_or_key: int | str, params: Mapping[str, Any] | None = None
    ) -> Board | None:
        """Fetch a single board."""
        return self._map(self._get(self._board_uri(board_id_or_key), params), Board.from_json)

    def get_projects(
        self, board_id_or_key: int | str, params: Mapping[str, Any] | None = None
    ) -> Page | None:
        """List the projects a board draws issues from."""
        resource = f"{self._board_uri(board_id_or_key)}/project"
        return self._map(self._get(resource, params), Page.from_json)

    def _board_uri(self, board_id_or_key: int | str) -> str:
        return f"{self.uri}/{quote(str(board_id_or_key), safe='')}"
