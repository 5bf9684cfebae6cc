"""Reactive read handle bound to an observable key."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import suppress
from typing import Any, Generic, TypeVar

from talentdesk.core.exceptions import ApplicationError
from talentdesk.errors import AppError
from talentdesk.query.cache import CachedQueryEntry, QueryStatus
from talentdesk.query.client import QueryClient
from talentdesk.query.keys import QueryKey
from talentdesk.query.observable import Observable, Unsubscribe, as_observable

P = TypeVar("P")
T = TypeVar("T")

ObserverListener = Callable[["QueryObserver[Any, Any]"], None]


class QueryObserver(Generic[P, T]):
    """Follow the cache entry for ``key_fn(params)`` as params change.

    A params change that yields a different key moves the observer to the
    new entry; the old key's fetch keeps running and fills its own entry
    but is never exposed here. With ``keep_previous_data`` the last
    successful data stays visible (``is_placeholder_data``) until the new
    key resolves with data or an error.
    """

    def __init__(
        self,
        client: QueryClient,
        key_fn: Callable[[P], QueryKey],
        fetcher_fn: Callable[[P], Awaitable[T]],
        params: Observable[P] | P = None,
        *,
        enabled: Observable[bool] | bool = True,
        stale_time: float | None = None,
        keep_previous_data: bool = False,
        revalidate_stale: bool = True,
    ):
        """Initialize the observer and fetch when enabled.

        Args:
            client: Query client owning the cache.
            key_fn: Builds the key from the current params.
            fetcher_fn: Performs the read for the given params.
            params: Current params, plain or observable.
            enabled: Gate; no fetch is dispatched while false.
            stale_time: Freshness window in seconds.
            keep_previous_data: Show the previous key's data while the new
                key loads.
            revalidate_stale: Refetch stale data in the background.
        """
        self.client = client
        self._key_fn = key_fn
        self._fetcher_fn = fetcher_fn
        self._params: Observable[P] = as_observable(params)
        self._enabled: Observable[bool] = as_observable(enabled)
        self.stale_time = stale_time
        self.keep_previous_data = keep_previous_data
        self.revalidate_stale = revalidate_stale

        self._listeners: list[ObserverListener] = []
        self._placeholder: Any = None
        self._has_placeholder = False
        self._destroyed = False

        self.key: QueryKey = key_fn(self._params.value)
        self._entry: CachedQueryEntry = client.cache.build(self.key)
        client.attach(self._entry, self)
        self._unlisten_entry = self._entry.listen(self._on_entry_change)
        self._unsubscribers: list[Unsubscribe] = [
            self._params.subscribe(self._on_params_change),
            self._enabled.subscribe(self._on_enabled_change),
        ]
        self._dispatch()

    @property
    def params(self) -> P:
        return self._params.value

    @property
    def enabled(self) -> bool:
        return bool(self._enabled.value) and not self._destroyed

    @property
    def status(self) -> QueryStatus:
        return self._entry.status

    @property
    def data(self) -> T | None:
        if self._entry.has_data:
            return self._entry.data
        if self._has_placeholder:
            return self._placeholder
        return None

    @property
    def error(self) -> AppError | None:
        return self._entry.error

    @property
    def is_placeholder_data(self) -> bool:
        return self._has_placeholder and not self._entry.has_data

    @property
    def is_loading(self) -> bool:
        """True while the first fetch for the current key is running."""
        return self._entry.status is QueryStatus.LOADING and not self._entry.has_data

    @property
    def is_fetching(self) -> bool:
        return self._entry.is_fetching

    @property
    def is_success(self) -> bool:
        return self._entry.status is QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self._entry.status is QueryStatus.ERROR

    def _fetcher(self) -> Callable[[], Awaitable[T]]:
        params = self._params.value
        return lambda: self._fetcher_fn(params)

    def _dispatch(self, *, force: bool = False) -> asyncio.Task[Any] | None:
        if not self.enabled:
            return None
        if force:
            return self.client.fetch(self.key, self._fetcher())
        return self.client.ensure(
            self.key,
            self._fetcher(),
            stale_time=self.stale_time,
            revalidate=self.revalidate_stale,
        )

    def _bind(self, key: QueryKey) -> None:
        self._unlisten_entry()
        self.client.detach(self._entry, self)
        self.key = key
        self._entry = self.client.cache.build(key)
        self.client.attach(self._entry, self)
        self._unlisten_entry = self._entry.listen(self._on_entry_change)

    def _sync_key(self) -> bool:
        """Move to the entry of the current params; ``True`` if the key changed."""
        key = self._key_fn(self._params.value)
        if key == self.key:
            return False
        previous = self._entry
        if not self.keep_previous_data:
            self._clear_placeholder()
        elif previous.has_data:
            self._placeholder = previous.data
            self._has_placeholder = True
        self._bind(key)
        if self._entry.has_data or self._entry.status is QueryStatus.ERROR:
            self._clear_placeholder()
        return True

    def _on_params_change(self, params: P) -> None:
        if self._sync_key():
            self._dispatch()
            self._emit()

    def _on_enabled_change(self, enabled: bool) -> None:
        self._sync_key()
        if enabled:
            self._dispatch()
        self._emit()

    def _on_entry_change(self, entry: CachedQueryEntry) -> None:
        if entry is not self._entry:
            return
        if self.client.cache.get(self.key) is not entry:
            # The cache was cleared; follow the key to its new entry.
            self._clear_placeholder()
            self._bind(self.key)
        elif entry.has_data or entry.status is QueryStatus.ERROR:
            self._clear_placeholder()
        self._emit()

    def _clear_placeholder(self) -> None:
        self._placeholder = None
        self._has_placeholder = False

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def on_invalidated(self) -> asyncio.Task[Any] | None:
        return self._dispatch(force=True)

    def subscribe(self, listener: ObserverListener) -> Unsubscribe:
        """Call ``listener`` whenever the exposed state may have changed."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait(self) -> T | None:
        """Wait until the current key has no fetch in flight.

        Failures are not raised; they are exposed through ``error``.

        Returns:
            The data visible once settled.
        """
        while self._entry.is_fetching:
            task = self._entry.task
            with suppress(ApplicationError):
                await asyncio.shield(task)
        return self.data

    async def refetch(self) -> T | None:
        """Fetch the current key now, ignoring freshness."""
        self._dispatch(force=True)
        return await self.wait()

    def destroy(self) -> None:
        """Detach from the cache; in-flight fetches finish unobserved."""
        if self._destroyed:
            return
        self._destroyed = True
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unlisten_entry()
        self.client.detach(self._entry, self)
        self._listeners.clear()


__all__ = ["ObserverListener", "QueryObserver"]
