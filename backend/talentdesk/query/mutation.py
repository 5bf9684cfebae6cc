"""One-shot writes that invalidate cached reads on success."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from loguru import logger

from talentdesk.core.exceptions import ApplicationError
from talentdesk.core.metrics import record_mutation
from talentdesk.errors import (
    AppError,
    ErrorCategory,
    categorize,
    normalize_error,
    to_user_message,
)
from talentdesk.policy.notifications import Notification, NotificationLevel, Notifier
from talentdesk.query.client import QueryClient
from talentdesk.query.keys import QueryKey

V = TypeVar("V")
T = TypeVar("T")

SuccessCallback = Callable[[T, V], Any]
ErrorCallback = Callable[[AppError, V], Any]
Invalidations = Iterable[QueryKey] | Callable[[V, T], Iterable[QueryKey]]


class MutationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class FailureHandler(Protocol):
    def handle(self, raw: Any, *, notify: bool = True) -> Any: ...


async def _call(callback: Callable[..., Any], *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class Mutation(Generic[V, T]):
    """Run a write once per ``mutate`` call.

    Writes never retry. On success the declared key prefixes are
    invalidated, then ``on_success`` runs (or a success notification is
    shown). On failure the error is normalized and handed to the global
    policy; a local ``on_error`` replaces the default notifications but not
    the sign-in redirect. The normalized error is then raised as
    ``ApplicationError``.
    """

    def __init__(
        self,
        client: QueryClient,
        mutation_fn: Callable[[V], Awaitable[T]],
        *,
        namespace: str,
        invalidates: Invalidations = (),
        policy: FailureHandler | None = None,
        notifier: Notifier | None = None,
        success_message: str | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
        offline: Callable[[], bool] = lambda: False,
    ):
        self.client = client
        self.namespace = namespace
        self._mutation_fn = mutation_fn
        self._invalidates = invalidates
        self._policy = policy
        self._notifier = notifier
        self.success_message = success_message
        self._on_success = on_success
        self._on_error = on_error
        self._offline = offline

        self.status = MutationStatus.IDLE
        self.data: T | None = None
        self.error: AppError | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is MutationStatus.PENDING

    def reset(self) -> None:
        self.status = MutationStatus.IDLE
        self.data = None
        self.error = None

    def _prefixes(self, variables: V, result: T) -> list[QueryKey]:
        if callable(self._invalidates):
            return list(self._invalidates(variables, result))
        return list(self._invalidates)

    def _notify(self, message: str, level: NotificationLevel) -> None:
        if self._notifier is not None:
            self._notifier.notify(Notification(message, level))

    async def mutate(
        self,
        variables: V,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> T:
        """Execute the write.

        Args:
            variables: Argument passed to the mutation function.
            on_success: Overrides the handle-level success callback.
            on_error: Overrides the handle-level error callback.

        Returns:
            The mutation function's result.

        Raises:
            ApplicationError: Carrying the normalized error on failure.
        """
        log = logger.bind(mutation=self.namespace)
        self.status = MutationStatus.PENDING
        self.error = None
        try:
            result = await self._mutation_fn(variables)
        except Exception as exc:
            error = normalize_error(exc, offline=self._offline())
            self.status = MutationStatus.ERROR
            self.error = error
            record_mutation(self.namespace, "error")
            log.bind(error_type=error.type).warning("Mutation failed")

            error_callback = on_error or self._on_error
            decision = None
            if self._policy is not None:
                decision = self._policy.handle(error, notify=error_callback is None)
            if error_callback is not None:
                await _call(error_callback, error, variables)
            elif getattr(decision, "notification", None) is None and categorize(
                error
            ) not in (ErrorCategory.VALIDATION, ErrorCategory.AUTH):
                self._notify(to_user_message(error), NotificationLevel.ERROR)
            raise ApplicationError(error, cause=exc) from exc

        self.status = MutationStatus.SUCCESS
        self.data = result
        record_mutation(self.namespace, "success")
        for prefix in self._prefixes(variables, result):
            self.client.invalidate(prefix)
        log.debug("Mutation succeeded")

        success_callback = on_success or self._on_success
        if success_callback is not None:
            await _call(success_callback, result, variables)
        elif self.success_message:
            self._notify(self.success_message, NotificationLevel.SUCCESS)
        return result


__all__ = [
    "ErrorCallback",
    "FailureHandler",
    "Mutation",
    "MutationStatus",
    "SuccessCallback",
]
