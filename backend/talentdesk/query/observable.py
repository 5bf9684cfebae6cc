"""Minimal observable values used for reactive query parameters."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")

Unsubscribe = Callable[[], None]


class Observable(Generic[T]):
    """A value that notifies subscribers when it changes.

    Setting a value equal to the current one (``==``, so structurally equal
    pydantic models and dicts included) is a no-op.
    """

    def __init__(self, value: T):
        self._value = value
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Replace the value.

        Returns:
            ``True`` when subscribers were notified.
        """
        if value == self._value:
            return False
        self._value = value
        for callback in list(self._subscribers):
            callback(value)
        return True

    def update(self, fn: Callable[[T], T]) -> bool:
        return self.set(fn(self._value))

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"


def as_observable(value: Observable[T] | T) -> Observable[T]:
    """Wrap plain values so callers may pass either form."""
    if isinstance(value, Observable):
        return value
    return Observable(value)


def computed(fn: Callable[..., R], *sources: Observable[Any]) -> Observable[R]:
    """Derive an observable recomputed whenever any source changes."""
    result = Observable(fn(*(source.value for source in sources)))

    def recompute(_: Any) -> None:
        result.set(fn(*(source.value for source in sources)))

    for source in sources:
        source.subscribe(recompute)
    return result


__all__ = ["Observable", "Unsubscribe", "as_observable", "computed"]
