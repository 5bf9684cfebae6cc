"""In-memory store of query results keyed by ``QueryKey``."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from talentdesk.errors.types import AppError
from talentdesk.query.keys import QueryKey, matches_prefix

EntryListener = Callable[["CachedQueryEntry"], None]


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(eq=False)
class CachedQueryEntry:
    """State of one key.

    ``data`` and ``error`` survive a refetch so observers can keep showing
    them while ``status`` is ``loading``.
    """

    key: QueryKey
    data: Any = None
    error: AppError | None = None
    raw_error: Any = None
    status: QueryStatus = QueryStatus.IDLE
    data_updated_at: float | None = None
    error_updated_at: float | None = None
    invalidated: bool = False
    observers: set[Any] = field(default_factory=set)
    inactive_since: float | None = None
    task: asyncio.Task[Any] | None = None
    _listeners: list[EntryListener] = field(default_factory=list, repr=False)

    @property
    def namespace(self) -> Any:
        return self.key[0] if self.key else None

    @property
    def has_data(self) -> bool:
        return self.data_updated_at is not None

    @property
    def is_fetching(self) -> bool:
        return self.task is not None and not self.task.done()

    def is_stale(self, now: float, stale_time: float) -> bool:
        """Return whether a read at ``now`` should refetch."""
        if self.invalidated or self.data_updated_at is None:
            return True
        if math.isinf(stale_time):
            return False
        return now - self.data_updated_at >= stale_time

    def listen(self, listener: EntryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unlisten() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unlisten

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def reset(self) -> None:
        self.data = None
        self.error = None
        self.raw_error = None
        self.status = QueryStatus.IDLE
        self.data_updated_at = None
        self.error_updated_at = None
        self.invalidated = False
        self.task = None


class QueryCache:
    """Mapping of keys to entries with prefix lookup."""

    def __init__(self) -> None:
        self._entries: dict[QueryKey, CachedQueryEntry] = {}

    def get(self, key: QueryKey) -> CachedQueryEntry | None:
        return self._entries.get(key)

    def build(self, key: QueryKey) -> CachedQueryEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = CachedQueryEntry(key=key)
            self._entries[key] = entry
        return entry

    def find_all(self, prefix: QueryKey = ()) -> list[CachedQueryEntry]:
        return [
            entry for key, entry in self._entries.items() if matches_prefix(key, prefix)
        ]

    def remove(self, entry: CachedQueryEntry) -> None:
        if self._entries.get(entry.key) is entry:
            del self._entries[entry.key]

    def clear(self) -> list[CachedQueryEntry]:
        removed = list(self._entries.values())
        self._entries.clear()
        return removed

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[CachedQueryEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CachedQueryEntry", "EntryListener", "QueryCache", "QueryStatus"]
