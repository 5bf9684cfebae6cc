"""Prometheus collectors for the query cache, mutations and database access."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator, TypeVar

from loguru import logger
from prometheus_client import REGISTRY, Counter, Histogram

MetricT = TypeVar("MetricT", Counter, Histogram)

# Survives module reloads so collectors are registered once per process.
_COLLECTORS: dict[str, Counter | Histogram] = globals().get("_COLLECTORS", {})


def _registered(
    metric_cls: type[MetricT], name: str, documentation: str, *labels: str
) -> MetricT:
    """Register ``name`` with the default registry, or hand back the live one.

    Raises:
        ValueError: If the name is taken by a collector this module cannot reuse.
    """
    if name in _COLLECTORS:
        return _COLLECTORS[name]  # type: ignore[return-value]

    try:
        collector = metric_cls(name, documentation, labelnames=labels)
    except ValueError:
        collector = getattr(REGISTRY, "_names_to_collectors", {}).get(name)
        if not isinstance(collector, metric_cls):
            raise
        logger.debug("Reusing registered collector", metric=name)

    _COLLECTORS[name] = collector
    return collector


query_fetches_total = _registered(
    Counter,
    "query_fetches_total",
    "Backend fetches issued by the query cache, by namespace and outcome.",
    "namespace",
    "outcome",
)
query_cache_hits_total = _registered(
    Counter,
    "query_cache_hits_total",
    "Reads served from fresh cache entries, by namespace.",
    "namespace",
)
query_retries_total = _registered(
    Counter,
    "query_retries_total",
    "Read retries scheduled by the retry policy, by error category.",
    "namespace",
    "category",
)
mutations_total = _registered(
    Counter,
    "mutations_total",
    "Mutations executed, by namespace and outcome.",
    "namespace",
    "outcome",
)
db_query_duration_seconds = _registered(
    Histogram,
    "db_query_duration_seconds",
    "Time spent in service database calls, by query type.",
    "query_type",
)


def _label(value: object, label_name: str) -> str:
    text = "" if value is None else str(value)
    if not text:
        raise ValueError(f"{label_name} label must be a non-empty string.")
    return text


def record_query_fetch(namespace: object, outcome: str) -> None:
    """Count a fetch that settled as ``success``, ``error`` or ``discarded``.

    Raises:
        ValueError: If namespace is empty.
    """
    query_fetches_total.labels(_label(namespace, "namespace"), outcome).inc()


def record_cache_hit(namespace: object) -> None:
    query_cache_hits_total.labels(_label(namespace, "namespace")).inc()


def record_query_retry(namespace: object, category: str) -> None:
    query_retries_total.labels(_label(namespace, "namespace"), category).inc()


def record_mutation(namespace: str, outcome: str) -> None:
    """Count a settled mutation against its entity namespace."""
    mutations_total.labels(_label(namespace, "namespace"), outcome).inc()


def observe_db_query_duration(query_type: str, duration_seconds: float) -> None:
    """Record how long one service query took.

    Args:
        query_type: Dotted label such as ``"candidates.select"``.
        duration_seconds: Elapsed wall time.

    Raises:
        ValueError: On an empty label or a negative duration.
    """
    label = _label(query_type, "query_type")
    if duration_seconds < 0:
        raise ValueError("duration_seconds cannot be negative.")
    db_query_duration_seconds.labels(label).observe(duration_seconds)


@contextmanager
def db_query_timer(query_type: str) -> Iterator[None]:
    """Time the wrapped block into ``db_query_duration_seconds``.

    The metric is best effort: a rejected label is logged and the block's
    own outcome is left untouched.
    """
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - started
        try:
            observe_db_query_duration(query_type, elapsed)
        except ValueError as exc:
            logger.warning(
                "Dropped db query timing",
                query_type=query_type,
                elapsed=elapsed,
                error=str(exc),
            )


__all__ = [
    "db_query_duration_seconds",
    "db_query_timer",
    "mutations_total",
    "observe_db_query_duration",
    "query_cache_hits_total",
    "query_fetches_total",
    "query_retries_total",
    "record_cache_hit",
    "record_mutation",
    "record_query_fetch",
    "record_query_retry",
]
