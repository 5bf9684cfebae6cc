"""Navigation collaborator used for sign-in redirects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol
from urllib.parse import urlencode


class Navigator(Protocol):
    @property
    def current_path(self) -> str: ...

    @property
    def current_url(self) -> str: ...

    def push(self, path: str, query: Mapping[str, str] | None = None) -> None: ...


class InMemoryNavigator:
    """Tracks the current location for headless use and tests."""

    def __init__(self, path: str = "/", query: Mapping[str, str] | None = None):
        self._path = path
        self._query = dict(query or {})
        self.history: list[str] = [self.current_url]

    @property
    def current_path(self) -> str:
        return self._path

    @property
    def current_query(self) -> dict[str, str]:
        return dict(self._query)

    @property
    def current_url(self) -> str:
        if not self._query:
            return self._path
        return f"{self._path}?{urlencode(self._query)}"

    def push(self, path: str, query: Mapping[str, str] | None = None) -> None:
        self._path = path
        self._query = dict(query or {})
        self.history.append(self.current_url)


__all__ = ["InMemoryNavigator", "Navigator"]
