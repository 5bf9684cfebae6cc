"""Tests for the global error policy."""

from __future__ import annotations

import pytest

from talentdesk.core.exceptions import AuthError
from talentdesk.errors import (
    AuthAppError,
    DatabaseAppError,
    ErrorCategory,
    ErrorMessages,
    HttpAppError,
    NetworkAppError,
    NotFoundAppError,
    UnknownAppError,
    ValidationAppError,
)
from talentdesk.policy import (
    GlobalErrorPolicy,
    InMemoryNavigator,
    NotificationCenter,
    NotificationLevel,
)
from talentdesk.policy.error_policy import (
    NETWORK_NOTIFICATION_ID,
    PolicyAction,
    REDIRECT_QUERY_PARAM,
)


@pytest.fixture
def policy(
    notifier: NotificationCenter, navigator: InMemoryNavigator
) -> GlobalErrorPolicy:
    return GlobalErrorPolicy(notifier, navigator, sign_in_path="/auth/signin")


def test_auth_error_redirects_with_return_path(
    policy: GlobalErrorPolicy,
    notifier: NotificationCenter,
    navigator: InMemoryNavigator,
) -> None:
    decision = policy.handle(AuthError("JWT expired", status=401))

    assert decision.action is PolicyAction.REDIRECT
    assert navigator.current_path == "/auth/signin"
    assert navigator.current_query == {REDIRECT_QUERY_PARAM: "/candidates?page=2"}
    assert [item.message for item in notifier.history] == [
        ErrorMessages.SESSION_EXPIRED
    ]


def test_auth_error_on_sign_in_page_is_silent_and_idempotent(
    policy: GlobalErrorPolicy,
    notifier: NotificationCenter,
    navigator: InMemoryNavigator,
) -> None:
    policy.handle(AuthAppError(code="401", message="expired"))
    history_after_first = list(navigator.history)

    decision = policy.handle(AuthAppError(code="401", message="expired"))

    assert decision.action is PolicyAction.SILENT
    assert navigator.history == history_after_first
    assert len(notifier.history) == 1


def test_auth_redirect_happens_even_without_notifications(
    policy: GlobalErrorPolicy, navigator: InMemoryNavigator
) -> None:
    decision = policy.handle(AuthAppError(code="401", message="expired"), notify=False)

    assert decision.redirect_to == "/auth/signin"
    assert navigator.current_path == "/auth/signin"


def test_network_notification_is_persistent_and_deduplicated(
    policy: GlobalErrorPolicy, notifier: NotificationCenter
) -> None:
    policy.handle(NetworkAppError(message=ErrorMessages.OFFLINE))
    policy.handle(NetworkAppError(message=ErrorMessages.OFFLINE))

    assert len(notifier.history) == 1
    shown = notifier.history[0]
    assert shown.id == NETWORK_NOTIFICATION_ID
    assert shown.persistent
    assert shown.effective_duration_ms is None
    assert shown.description == ErrorMessages.OFFLINE
    assert notifier.is_active(NETWORK_NOTIFICATION_ID)

    notifier.dismiss(NETWORK_NOTIFICATION_ID)
    policy.handle(NetworkAppError(message=ErrorMessages.OFFLINE))
    assert len(notifier.history) == 2


def test_server_error_shows_generic_message(
    policy: GlobalErrorPolicy, notifier: NotificationCenter
) -> None:
    decision = policy.handle(HttpAppError(status=502, message="Bad Gateway"))

    assert decision.category is ErrorCategory.SERVER
    assert notifier.history[0].message == ErrorMessages.SERVER_ERROR
    assert notifier.history[0].level is NotificationLevel.ERROR
    assert notifier.history[0].effective_duration_ms == 5000


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (NotFoundAppError(resource="candidate", id="1"), ErrorMessages.NOT_FOUND),
        (HttpAppError(status=409, message="conflict"), ErrorMessages.CONFLICT),
        (HttpAppError(status=429, message="slow"), ErrorMessages.RATE_LIMITED),
    ],
)
def test_selected_client_errors_get_a_warning(
    policy: GlobalErrorPolicy,
    notifier: NotificationCenter,
    error,
    message: str,
) -> None:
    policy.handle(error)

    assert [item.message for item in notifier.history] == [message]
    assert notifier.history[0].level is NotificationLevel.WARNING


@pytest.mark.parametrize(
    "error",
    [
        DatabaseAppError(code="23505", message="duplicate"),
        HttpAppError(status=400, message="bad request"),
        ValidationAppError(fields={"email": ["Invalid"]}),
    ],
)
def test_other_client_and_validation_errors_are_silent(
    policy: GlobalErrorPolicy,
    notifier: NotificationCenter,
    navigator: InMemoryNavigator,
    error,
) -> None:
    decision = policy.handle(error)

    assert decision.action is PolicyAction.SILENT
    assert notifier.history == []
    assert navigator.current_path == "/candidates"


def test_unknown_error_is_shown(
    policy: GlobalErrorPolicy, notifier: NotificationCenter
) -> None:
    policy.handle(UnknownAppError(message="Something odd"))

    assert notifier.history[0].message == "Something odd"


def test_notify_false_suppresses_notifications(
    policy: GlobalErrorPolicy, notifier: NotificationCenter
) -> None:
    decision = policy.handle(HttpAppError(status=500, message="boom"), notify=False)

    assert decision.action is PolicyAction.SILENT
    assert notifier.history == []


def test_raw_values_are_normalized(
    policy: GlobalErrorPolicy, notifier: NotificationCenter
) -> None:
    decision = policy("plain failure")

    assert decision.category is ErrorCategory.UNKNOWN
    assert notifier.history[0].message == "plain failure"


def test_offline_runtime_is_treated_as_network(
    notifier: NotificationCenter, navigator: InMemoryNavigator
) -> None:
    policy = GlobalErrorPolicy(notifier, navigator, offline=lambda: True)

    decision = policy.handle(KeyError("boom"))

    assert decision.category is ErrorCategory.NETWORK


def test_decide_has_no_side_effects(
    policy: GlobalErrorPolicy,
    notifier: NotificationCenter,
    navigator: InMemoryNavigator,
) -> None:
    decision = policy.decide(AuthAppError(code="401", message="expired"))

    assert decision.redirect_query == {REDIRECT_QUERY_PARAM: "/candidates?page=2"}
    assert notifier.history == []
    assert navigator.current_path == "/candidates"
