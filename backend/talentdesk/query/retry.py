"""Read retry policy keyed on the error category."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, wait_exponential

from talentdesk.core.config import settings
from talentdesk.core.metrics import record_query_retry
from talentdesk.errors import ErrorCategory, categorize, normalize_error
from talentdesk.query.keys import QueryKey

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


class RetryPolicy:
    """Retry transient read failures with capped exponential backoff.

    Network failures get ``network_retries`` extra attempts and server
    failures ``server_retries``; every other category fails on the first
    attempt. Delays start at ``base_delay`` and double up to ``max_delay``.
    """

    def __init__(
        self,
        *,
        network_retries: int = settings.QUERY_NETWORK_RETRIES,
        server_retries: int = settings.QUERY_SERVER_RETRIES,
        base_delay: float = settings.QUERY_RETRY_BASE_DELAY_SECONDS,
        max_delay: float = settings.QUERY_RETRY_MAX_DELAY_SECONDS,
        sleep: Sleep = asyncio.sleep,
        offline: Callable[[], bool] = lambda: False,
    ):
        if network_retries < 0 or server_retries < 0:
            raise ValueError("retry budgets cannot be negative")
        self.budgets: dict[ErrorCategory, int] = {
            ErrorCategory.NETWORK: network_retries,
            ErrorCategory.SERVER: server_retries,
        }
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep
        self._offline = offline
        self._wait = wait_exponential(multiplier=base_delay, exp_base=2, max=max_delay)

    def category_of(self, exc: BaseException) -> ErrorCategory:
        return categorize(normalize_error(exc, offline=self._offline()))

    def max_retries(self, category: ErrorCategory) -> int:
        return self.budgets.get(category, 0)

    def _is_retryable(self, exc: BaseException) -> bool:
        return self.max_retries(self.category_of(exc)) > 0

    def _stop(self, retry_state: RetryCallState) -> bool:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if exc is None:
            return True
        allowed = self.max_retries(self.category_of(exc))
        return retry_state.attempt_number > allowed

    async def call(self, fn: Callable[[], Awaitable[T]], *, key: QueryKey = ()) -> T:
        """Run ``fn`` until it succeeds or the retry budget is spent.

        Args:
            fn: Zero-argument coroutine factory performing the read.
            key: Query key, used for logging and metrics.

        Returns:
            The value returned by ``fn``.

        Raises:
            Exception: The last error raised by ``fn``, unchanged.
        """
        namespace = key[0] if key else "unknown"

        def before_sleep(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            category = self.category_of(exc) if exc is not None else ErrorCategory.UNKNOWN
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            record_query_retry(namespace, category.value)
            logger.bind(
                query_key=repr(key),
                attempt=retry_state.attempt_number,
                category=category.value,
                delay=delay,
            ).warning("Retrying query after failure")

        retrying = AsyncRetrying(
            retry=retry_if_exception(self._is_retryable),
            stop=self._stop,
            wait=self._wait,
            sleep=self._sleep,
            before_sleep=before_sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await fn()
        raise RuntimeError("retry loop exited without an outcome")


__all__ = ["RetryPolicy", "Sleep"]
