"""Query client: de-duplicated, stale-aware reads over the query cache."""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from loguru import logger

from talentdesk.core.config import settings
from talentdesk.core.exceptions import ApplicationError
from talentdesk.core.metrics import record_cache_hit, record_query_fetch
from talentdesk.errors import AppError, normalize_error
from talentdesk.query.cache import CachedQueryEntry, QueryCache, QueryStatus
from talentdesk.query.keys import QueryKey
from talentdesk.query.retry import RetryPolicy

Fetcher = Callable[[], Awaitable[Any]]
ErrorHook = Callable[[AppError], Any]
Clock = Callable[[], float]


class EntryObserver(Protocol):
    @property
    def enabled(self) -> bool: ...

    def on_invalidated(self) -> asyncio.Task[Any] | None: ...


class QueryClient:
    """Own the cache and run fetches for it.

    At most one fetch runs per key; callers asking for the same key while it
    is in flight share the task. Results that arrive for an entry that was
    cleared or evicted in the meantime are dropped.
    """

    def __init__(
        self,
        *,
        retry: RetryPolicy | None = None,
        on_error: ErrorHook | None = None,
        stale_time: float = settings.QUERY_STALE_TIME_SECONDS,
        gc_time: float = settings.QUERY_GC_TIME_SECONDS,
        clock: Clock = time.monotonic,
        offline: Callable[[], bool] = lambda: False,
    ):
        """Initialize the client.

        Args:
            retry: Read retry policy.
            on_error: Called once with the normalized error of every read
                that failed after retries, unless every observer of the
                key left before the failure arrived.
            stale_time: Default seconds a successful result stays fresh.
            gc_time: Seconds an unobserved entry is kept.
            clock: Monotonic time source.
            offline: Reports whether the runtime has no connectivity.
        """
        self.cache = QueryCache()
        self.retry = retry or RetryPolicy(offline=offline)
        self.on_error = on_error
        self.default_stale_time = stale_time
        self.gc_time = gc_time
        self.generation = 0
        self._gc_timer: asyncio.TimerHandle | None = None
        self._clock = clock
        self._offline = offline

    def now(self) -> float:
        return self._clock()

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self.cache.get(key)
        return entry.data if entry is not None else None

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        entry = self.cache.build(key)
        entry.data = data
        entry.error = None
        entry.raw_error = None
        entry.status = QueryStatus.SUCCESS
        entry.data_updated_at = self.now()
        entry.invalidated = False
        entry.notify()

    def _is_discarded(self, entry: CachedQueryEntry, generation: int) -> bool:
        return generation != self.generation or self.cache.get(entry.key) is not entry

    def _report(self, error: AppError) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(error)
        except Exception:
            logger.bind(error_type=error.type).exception("Global error handler failed")

    @staticmethod
    def _is_abandoned(entry: CachedQueryEntry, observed: bool) -> bool:
        """True when every observer that wanted this fetch has moved on."""
        return observed and not any(observer.enabled for observer in entry.observers)

    async def _run(
        self,
        entry: CachedQueryEntry,
        fetcher: Fetcher,
        generation: int,
        observed: bool,
    ) -> Any:
        key = entry.key
        log = logger.bind(query_key=repr(key))
        log.debug("Fetching query")
        try:
            data = await self.retry.call(fetcher, key=key)
        except Exception as exc:
            if self._is_discarded(entry, generation):
                record_query_fetch(entry.namespace, "discarded")
                log.debug("Dropped failure for a cleared query")
                return None
            error = normalize_error(exc, offline=self._offline())
            entry.error = error
            entry.raw_error = exc
            entry.status = QueryStatus.ERROR
            entry.error_updated_at = self.now()
            entry.task = None
            record_query_fetch(entry.namespace, "error")
            log.bind(error_type=error.type).warning("Query failed")
            entry.notify()
            if self._is_abandoned(entry, observed):
                log.debug("Failure of an unobserved query kept on its entry only")
            else:
                self._report(error)
            raise ApplicationError(error, cause=exc) from exc

        if self._is_discarded(entry, generation):
            record_query_fetch(entry.namespace, "discarded")
            log.debug("Dropped result for a cleared query")
            return None
        entry.data = data
        entry.error = None
        entry.raw_error = None
        entry.status = QueryStatus.SUCCESS
        entry.data_updated_at = self.now()
        entry.invalidated = False
        entry.task = None
        record_query_fetch(entry.namespace, "success")
        log.debug("Query succeeded")
        entry.notify()
        return data

    def _on_task_done(self, entry: CachedQueryEntry, task: asyncio.Task[Any]) -> None:
        if not task.cancelled():
            # Mark the exception retrieved; awaiting callers still receive it.
            task.exception()
        if entry.task is task:
            entry.task = None
        if not entry.observers:
            entry.inactive_since = self.now()
            self._schedule_gc()

    def fetch(self, key: QueryKey, fetcher: Fetcher) -> asyncio.Task[Any]:
        """Start a fetch for ``key`` or join the one in flight.

        Returns:
            The task resolving to the fetched data. It raises
            ``ApplicationError`` when the read fails after retries and
            resolves to ``None`` when the result was dropped.
        """
        entry = self.cache.build(key)
        if entry.is_fetching:
            return entry.task
        task = asyncio.get_running_loop().create_task(
            self._run(entry, fetcher, self.generation, bool(entry.observers))
        )
        task.add_done_callback(lambda done: self._on_task_done(entry, done))
        entry.task = task
        entry.status = QueryStatus.LOADING
        entry.notify()
        return task

    def ensure(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        *,
        stale_time: float | None = None,
        revalidate: bool = True,
    ) -> asyncio.Task[Any] | None:
        """Fetch ``key`` only when its cached result is missing or stale.

        Args:
            key: Query key.
            fetcher: Coroutine factory performing the read.
            stale_time: Freshness window; the client default when ``None``.
            revalidate: When ``False`` stale data is kept unless it was
                invalidated.

        Returns:
            The running fetch task, or ``None`` when the cache was served.
        """
        entry = self.cache.build(key)
        if entry.is_fetching:
            return entry.task
        window = self.default_stale_time if stale_time is None else stale_time
        if not entry.is_stale(self.now(), window):
            record_cache_hit(entry.namespace)
            return None
        if not revalidate and entry.has_data and not entry.invalidated:
            record_cache_hit(entry.namespace)
            return None
        return self.fetch(key, fetcher)

    async def fetch_query(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        *,
        stale_time: float | None = None,
    ) -> Any:
        """Return fresh data for ``key``, fetching when needed.

        Raises:
            ApplicationError: If the read failed after retries.
        """
        task = self.ensure(key, fetcher, stale_time=stale_time)
        if task is None:
            return self.cache.build(key).data
        return await asyncio.shield(task)

    def invalidate(
        self, prefix: QueryKey, *, refetch_active: bool = True
    ) -> list[asyncio.Task[Any]]:
        """Mark every entry under ``prefix`` stale.

        Args:
            prefix: Key prefix, e.g. ``("candidates", "list")``.
            refetch_active: Refetch entries with enabled observers now.

        Returns:
            Fetch tasks started or joined by the refetch.
        """
        entries = self.cache.find_all(prefix)
        tasks: list[asyncio.Task[Any]] = []
        for entry in entries:
            entry.invalidated = True
            if not refetch_active:
                continue
            for observer in list(entry.observers):
                task = observer.on_invalidated()
                if task is not None and task not in tasks:
                    tasks.append(task)
        logger.bind(prefix=repr(prefix), entries=len(entries), refetches=len(tasks)).debug(
            "Invalidated queries"
        )
        return tasks

    def attach(self, entry: CachedQueryEntry, observer: EntryObserver) -> None:
        entry.observers.add(observer)
        entry.inactive_since = None

    def detach(self, entry: CachedQueryEntry, observer: EntryObserver) -> None:
        entry.observers.discard(observer)
        if not entry.observers:
            entry.inactive_since = self.now()
            self._schedule_gc()

    def _schedule_gc(self, delay: float | None = None) -> None:
        if math.isinf(self.gc_time) or self._gc_timer is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._gc_timer = loop.call_later(
            self.gc_time if delay is None else delay, self._on_gc_timer
        )

    def _on_gc_timer(self) -> None:
        self._gc_timer = None
        self.collect_garbage()
        pending = [
            entry.inactive_since
            for entry in self.cache
            if not entry.observers
            and not entry.is_fetching
            and entry.inactive_since is not None
        ]
        if pending:
            self._schedule_gc(max(0.0, min(pending) + self.gc_time - self.now()))

    def collect_garbage(self) -> int:
        """Evict entries unobserved for at least ``gc_time`` seconds.

        Returns:
            Number of evicted entries.
        """
        now = self.now()
        evicted = 0
        for entry in self.cache:
            if entry.observers or entry.is_fetching or entry.inactive_since is None:
                continue
            if now - entry.inactive_since >= self.gc_time:
                self.cache.remove(entry)
                evicted += 1
        if evicted:
            logger.bind(evicted=evicted).debug("Collected unused queries")
        return evicted

    def clear(self) -> None:
        """Drop every entry at once.

        In-flight fetches keep running but their results are discarded.
        Observers are told their entry was reset.
        """
        self.generation += 1
        removed = self.cache.clear()
        for entry in removed:
            entry.reset()
            entry.notify()
        logger.bind(entries=len(removed), generation=self.generation).info(
            "Cleared query cache"
        )


__all__ = ["Clock", "ErrorHook", "Fetcher", "QueryClient"]
