"""Tests for QueryObserver key tracking, gating and placeholder data."""

from __future__ import annotations

import pytest

from talentdesk.core.exceptions import ApplicationError
from talentdesk.errors import AppError
from talentdesk.query import Observable, QueryClient, QueryObserver, QueryStatus, RetryPolicy
from tests.factories import ControlledFetcher, FakeClock, RecordingSleep, settle


def key_fn(params: str) -> tuple[str, ...]:
    return ("items", "list", params)


@pytest.fixture
def client(clock: FakeClock, recording_sleep: RecordingSleep) -> QueryClient:
    return QueryClient(
        retry=RetryPolicy(sleep=recording_sleep),
        stale_time=30.0,
        gc_time=300.0,
        clock=clock,
    )


@pytest.mark.asyncio
async def test_fetches_on_creation_and_exposes_data(client: QueryClient) -> None:
    fetcher = ControlledFetcher()

    observer = QueryObserver(client, key_fn, fetcher, "a")
    assert observer.is_loading
    data = await observer.wait()

    assert data == "data:a"
    assert observer.is_success
    assert not observer.is_loading
    assert fetcher.calls == ["a"]


@pytest.mark.asyncio
async def test_disabled_observer_does_not_fetch_until_enabled(
    client: QueryClient,
) -> None:
    fetcher = ControlledFetcher()
    enabled = Observable(False)

    observer = QueryObserver(client, key_fn, fetcher, "a", enabled=enabled)
    await settle()

    assert fetcher.calls == []
    assert observer.status is QueryStatus.IDLE
    assert not observer.is_loading

    enabled.set(True)
    assert await observer.wait() == "data:a"
    assert fetcher.calls == ["a"]


@pytest.mark.asyncio
async def test_params_change_fetches_new_key(client: QueryClient) -> None:
    fetcher = ControlledFetcher()
    params = Observable("a")
    observer = QueryObserver(client, key_fn, fetcher, params)
    await observer.wait()

    params.set("b")
    data = await observer.wait()

    assert data == "data:b"
    assert observer.key == ("items", "list", "b")
    assert fetcher.calls == ["a", "b"]


@pytest.mark.asyncio
async def test_returning_to_a_fresh_key_uses_cache(client: QueryClient) -> None:
    fetcher = ControlledFetcher()
    params = Observable("a")
    observer = QueryObserver(client, key_fn, fetcher, params)
    await observer.wait()
    params.set("b")
    await observer.wait()

    params.set("a")

    assert observer.data == "data:a"
    assert not observer.is_fetching
    assert fetcher.calls == ["a", "b"]


@pytest.mark.asyncio
async def test_keep_previous_data_shows_placeholder_while_loading(
    client: QueryClient,
) -> None:
    fetcher = ControlledFetcher()
    params = Observable("a")
    observer = QueryObserver(client, key_fn, fetcher, params, keep_previous_data=True)
    await observer.wait()
    gate = fetcher.hold("b")

    params.set("b")

    assert observer.data == "data:a"
    assert observer.is_placeholder_data
    assert observer.is_fetching

    gate.set()
    assert await observer.wait() == "data:b"
    assert not observer.is_placeholder_data


@pytest.mark.asyncio
async def test_placeholder_is_dropped_when_new_key_fails(client: QueryClient) -> None:
    fetcher = ControlledFetcher(failures={"b": KeyError("boom")})
    params = Observable("a")
    observer = QueryObserver(client, key_fn, fetcher, params, keep_previous_data=True)
    await observer.wait()

    params.set("b")
    await observer.wait()

    assert observer.is_error
    assert observer.error.type == "unknown"
    assert observer.data is None
    assert not observer.is_placeholder_data


@pytest.mark.asyncio
async def test_without_keep_previous_data_old_data_is_hidden(
    client: QueryClient,
) -> None:
    fetcher = ControlledFetcher()
    params = Observable("a")
    observer = QueryObserver(client, key_fn, fetcher, params)
    await observer.wait()
    fetcher.hold("b")

    params.set("b")

    assert observer.data is None
    assert observer.is_loading


@pytest.mark.asyncio
async def test_late_result_of_previous_key_is_not_exposed(
    client: QueryClient,
) -> None:
    fetcher = ControlledFetcher()
    release_a = fetcher.hold("a")
    release_b = fetcher.hold("b")
    params = Observable("a")
    observer = QueryObserver(client, key_fn, fetcher, params)
    task_a = client.cache.get(key_fn("a")).task

    params.set("b")
    release_a.set()
    await task_a
    await settle()

    assert observer.data is None
    assert client.get_query_data(key_fn("a")) == "data:a"

    release_b.set()
    assert await observer.wait() == "data:b"


@pytest.mark.asyncio
async def test_late_failure_of_previous_key_is_not_reported(
    clock: FakeClock, recording_sleep: RecordingSleep
) -> None:
    reported: list[AppError] = []
    client = QueryClient(
        retry=RetryPolicy(sleep=recording_sleep),
        on_error=reported.append,
        clock=clock,
    )
    fetcher = ControlledFetcher()
    fetcher.failures["a"] = RuntimeError("page 1 blew up")
    release_a = fetcher.hold("a")
    params = Observable("a")
    observer = QueryObserver(client, key_fn, fetcher, params)
    task_a = client.cache.get(key_fn("a")).task

    params.set("b")
    assert await observer.wait() == "data:b"
    release_a.set()
    with pytest.raises(ApplicationError):
        await task_a
    await settle()

    assert observer.error is None
    assert client.cache.get(key_fn("a")).status is QueryStatus.ERROR
    assert reported == []


@pytest.mark.asyncio
async def test_failure_after_destroy_is_not_reported(
    clock: FakeClock, recording_sleep: RecordingSleep
) -> None:
    reported: list[AppError] = []
    client = QueryClient(
        retry=RetryPolicy(sleep=recording_sleep),
        on_error=reported.append,
        clock=clock,
    )
    fetcher = ControlledFetcher()
    fetcher.failures["a"] = RuntimeError("view is gone")
    release = fetcher.hold("a")
    observer = QueryObserver(client, key_fn, fetcher, "a")
    task = client.cache.get(key_fn("a")).task

    observer.destroy()
    release.set()
    with pytest.raises(ApplicationError):
        await task

    assert reported == []


@pytest.mark.asyncio
async def test_failure_of_current_key_is_reported(
    clock: FakeClock, recording_sleep: RecordingSleep
) -> None:
    reported: list[AppError] = []
    client = QueryClient(
        retry=RetryPolicy(sleep=recording_sleep),
        on_error=reported.append,
        clock=clock,
    )
    fetcher = ControlledFetcher()
    fetcher.failures["a"] = RuntimeError("still watching")

    observer = QueryObserver(client, key_fn, fetcher, "a")
    await observer.wait()

    assert observer.is_error
    assert [error.message for error in reported] == ["still watching"]


@pytest.mark.asyncio
async def test_invalidation_refetches_active_observer(client: QueryClient) -> None:
    fetcher = ControlledFetcher()
    observer = QueryObserver(client, key_fn, fetcher, "a")
    await observer.wait()

    tasks = client.invalidate(("items",))

    assert len(tasks) == 1
    await tasks[0]
    assert fetcher.calls == ["a", "a"]
    assert observer.data == "data:a"


@pytest.mark.asyncio
async def test_disabled_observer_is_not_refetched_on_invalidation(
    client: QueryClient,
) -> None:
    fetcher = ControlledFetcher()
    enabled = Observable(True)
    observer = QueryObserver(client, key_fn, fetcher, "a", enabled=enabled)
    await observer.wait()
    enabled.set(False)

    tasks = client.invalidate(("items",))

    assert tasks == []
    assert fetcher.calls == ["a"]


@pytest.mark.asyncio
async def test_subscribers_are_notified(client: QueryClient) -> None:
    fetcher = ControlledFetcher()
    observer = QueryObserver(client, key_fn, fetcher, "a")
    seen: list[QueryStatus] = []
    observer.subscribe(lambda current: seen.append(current.status))

    await observer.wait()
    await settle()

    assert QueryStatus.SUCCESS in seen


@pytest.mark.asyncio
async def test_observer_follows_cleared_cache(client: QueryClient) -> None:
    fetcher = ControlledFetcher()
    observer = QueryObserver(client, key_fn, fetcher, "a")
    await observer.wait()

    client.clear()

    assert observer.data is None
    assert observer.status is QueryStatus.IDLE
    assert client.cache.get(key_fn("a")) is not None
    assert observer.key == key_fn("a")


@pytest.mark.asyncio
async def test_refetch_ignores_freshness(client: QueryClient) -> None:
    fetcher = ControlledFetcher()
    observer = QueryObserver(client, key_fn, fetcher, "a")
    await observer.wait()

    await observer.refetch()

    assert fetcher.calls == ["a", "a"]


@pytest.mark.asyncio
async def test_destroy_detaches_from_cache(client: QueryClient) -> None:
    fetcher = ControlledFetcher()
    observer = QueryObserver(client, key_fn, fetcher, "a")
    await observer.wait()

    observer.destroy()

    entry = client.cache.get(key_fn("a"))
    assert observer not in entry.observers
    assert entry.inactive_since is not None
    assert not observer.enabled
