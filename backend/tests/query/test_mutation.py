"""Tests for Mutation success and failure handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from talentdesk.core.exceptions import ApplicationError, AuthError, ValidationFailedError
from talentdesk.errors import ErrorMessages, normalize_error
from talentdesk.policy import NotificationCenter, NotificationLevel
from talentdesk.query import (
    Mutation,
    MutationStatus,
    QueryClient,
    QueryObserver,
    RetryPolicy,
)
from tests.factories import ControlledFetcher, FakeClock, RecordingSleep


@dataclass
class RecordingPolicy:
    """Failure handler stub recording what it was asked to handle."""

    notification: Any = None
    calls: list[tuple[Any, bool]] = field(default_factory=list)

    def handle(self, raw: Any, *, notify: bool = True) -> SimpleNamespace:
        self.calls.append((normalize_error(raw), notify))
        return SimpleNamespace(notification=self.notification if notify else None)


@dataclass
class FakeWrite:
    result: Any = "saved"
    error: Exception | None = None
    calls: list[Any] = field(default_factory=list)

    async def __call__(self, variables: Any) -> Any:
        self.calls.append(variables)
        if self.error is not None:
            raise self.error
        return self.result


class PayloadError(Exception):
    """Exception carrying a database-shaped payload as attributes."""

    def __init__(self, payload: dict[str, Any]):
        super().__init__(payload["message"])
        self.code = payload["code"]
        self.message = payload["message"]
        self.details = payload["details"]


@pytest.fixture
def client(clock: FakeClock, recording_sleep: RecordingSleep) -> QueryClient:
    return QueryClient(retry=RetryPolicy(sleep=recording_sleep), clock=clock)


@pytest.mark.asyncio
async def test_success_invalidates_and_refetches_active_lists(
    client: QueryClient, notifier: NotificationCenter
) -> None:
    fetcher = ControlledFetcher()
    observer = QueryObserver(
        client, lambda params: ("candidates", "list", params), fetcher, "all"
    )
    await observer.wait()
    mutation = Mutation(
        client,
        FakeWrite(),
        namespace="candidates",
        invalidates=[("candidates", "list")],
        notifier=notifier,
        success_message="Candidate created successfully!",
    )

    result = await mutation.mutate({"first_name": "Dana"})
    await observer.wait()

    assert result == "saved"
    assert mutation.status is MutationStatus.SUCCESS
    assert fetcher.calls == ["all", "all"]
    assert [item.message for item in notifier.history] == [
        "Candidate created successfully!"
    ]
    assert notifier.history[0].level is NotificationLevel.SUCCESS


@pytest.mark.asyncio
async def test_invalidations_may_depend_on_variables_and_result(
    client: QueryClient,
) -> None:
    client.set_query_data(("applications", "candidate", "c-1"), [])
    client.set_query_data(("applications", "candidate", "c-2"), [])
    mutation = Mutation(
        client,
        FakeWrite(result={"candidate_id": "c-1"}),
        namespace="applications",
        invalidates=lambda variables, result: [
            ("applications", "candidate", result["candidate_id"])
        ],
    )

    await mutation.mutate({})

    assert client.cache.get(("applications", "candidate", "c-1")).invalidated
    assert not client.cache.get(("applications", "candidate", "c-2")).invalidated


@pytest.mark.asyncio
async def test_local_success_callback_replaces_notification(
    client: QueryClient, notifier: NotificationCenter
) -> None:
    seen: list[tuple[Any, Any]] = []

    async def on_success(result: Any, variables: Any) -> None:
        seen.append((result, variables))

    mutation = Mutation(
        client,
        FakeWrite(),
        namespace="jobs",
        notifier=notifier,
        success_message="Job created successfully!",
    )

    await mutation.mutate("vars", on_success=on_success)

    assert seen == [("saved", "vars")]
    assert notifier.history == []


@pytest.mark.asyncio
async def test_failure_goes_to_policy_and_raises(
    client: QueryClient, notifier: NotificationCenter
) -> None:
    policy = RecordingPolicy(notification="shown by policy")
    write = FakeWrite(error=httpx.ConnectError("refused"))
    mutation = Mutation(
        client, write, namespace="jobs", policy=policy, notifier=notifier
    )

    with pytest.raises(ApplicationError) as exc_info:
        await mutation.mutate("vars")

    assert exc_info.value.error.type == "network"
    assert mutation.status is MutationStatus.ERROR
    assert mutation.error.type == "network"
    assert [(error.type, notify) for error, notify in policy.calls] == [
        ("network", True)
    ]
    assert notifier.history == []


@pytest.mark.asyncio
async def test_writes_are_never_retried(
    client: QueryClient, recording_sleep: RecordingSleep
) -> None:
    write = FakeWrite(error=httpx.ConnectError("refused"))
    mutation = Mutation(client, write, namespace="jobs")

    with pytest.raises(ApplicationError):
        await mutation.mutate("vars")

    assert write.calls == ["vars"]
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_silent_policy_falls_back_to_error_notification(
    client: QueryClient, notifier: NotificationCenter
) -> None:
    duplicate = {"code": "23505", "message": "duplicate key", "details": None}
    mutation = Mutation(
        client,
        FakeWrite(error=PayloadError(duplicate)),
        namespace="candidates",
        policy=RecordingPolicy(),
        notifier=notifier,
    )

    with pytest.raises(ApplicationError):
        await mutation.mutate("vars")

    assert [item.message for item in notifier.history] == [ErrorMessages.DUPLICATE]
    assert notifier.history[0].level is NotificationLevel.ERROR


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ValidationFailedError({"title": ["Required"]}),
        AuthError("JWT expired", status=401),
    ],
)
async def test_validation_and_auth_failures_get_no_default_notification(
    client: QueryClient, notifier: NotificationCenter, error: Exception
) -> None:
    mutation = Mutation(
        client, FakeWrite(error=error), namespace="jobs", notifier=notifier
    )

    with pytest.raises(ApplicationError):
        await mutation.mutate("vars")

    assert notifier.history == []


@pytest.mark.asyncio
async def test_local_error_callback_suppresses_policy_notification(
    client: QueryClient, notifier: NotificationCenter
) -> None:
    policy = RecordingPolicy(notification="shown by policy")
    seen: list[str] = []
    mutation = Mutation(
        client,
        FakeWrite(error=KeyError("boom")),
        namespace="jobs",
        policy=policy,
        notifier=notifier,
        on_error=lambda error, variables: seen.append(error.type),
    )

    with pytest.raises(ApplicationError):
        await mutation.mutate("vars")

    assert seen == ["unknown"]
    assert policy.calls[0][1] is False
    assert notifier.history == []


@pytest.mark.asyncio
async def test_reset_returns_to_idle(client: QueryClient) -> None:
    mutation = Mutation(client, FakeWrite(), namespace="jobs")
    await mutation.mutate("vars")

    mutation.reset()

    assert mutation.status is MutationStatus.IDLE
    assert mutation.data is None
    assert not mutation.is_pending

