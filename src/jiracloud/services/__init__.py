"""Resource services built on the authenticated request executor."""

from jiracloud.services.base import Board, JiraService, Page
from jiracloud.services.board import BoardService
from jiracloud.services.label import LabelService

__all__ = [
    "Board",
    "BoardService",
    "JiraService",
    "LabelService",
    "Page",
]
