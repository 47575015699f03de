"""Shared plumbing for resource services.

Services map JSON onto small response objects. A payload that cannot be
decoded or mapped is logged and the call returns None; HTTP errors from the
executor are never swallowed.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from loguru import logger

from jiracloud.transport import API_PATH, AuthenticatedRequestExecutor

T = TypeVar("T")


@dataclass(frozen=True)
class Page:
    """One page of a paginated Jira response."""

    start_at: int
    max_results: int
    total: int | None
    is_last: bool
    values: tuple[Any, ...]
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Page:
        values = data["values"]
        if not isinstance(values, list):
            raise TypeError("'values' is not a list")
        return cls(
            start_at=int(data.get("startAt", 0)),
            max_results=int(data.get("maxResults", len(values))),
            total=int(data["total"]) if data.get("total") is not None else None,
            is_last=bool(data.get("isLast", True)),
            values=tuple(values),
            raw=data,
        )


@dataclass(frozen=True)
class Board:
    """An Agile board."""

    id: int
    name: str
    type: str
    self_url: str = ""
    location: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Board:
        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            type=data.get("type", ""),
            self_url=data.get("self", ""),
            location=data.get("location") or {},
            raw=data,
        )


class JiraService:
    """Base class for services issuing calls through one executor."""

    api_path = API_PATH

    def __init__(self, executor: AuthenticatedRequestExecutor) -> None:
        self._executor = executor

    def _get(self, resource: str, params: Mapping[str, Any] | None = None) -> Any:
        return self._executor.send("GET", resource, params, api_path=self.api_path)

    def _map(self, data: Any, factory: Callable[[dict[str, Any]], T]) -> T | None:
        if data is None:
            return None
        try:
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            return factory(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Response cannot be mapped\nException: {}", e)
            return None
