"""Structural cache keys.

A key is a tuple ``(namespace, scope, *params)``. Params are frozen into
hashable, order-insensitive values so two filter objects with the same
content always produce the same key.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any

from pydantic import BaseModel

QueryKey = tuple[Hashable, ...]

LIST_SCOPE = "list"
DETAIL_SCOPE = "detail"


class FrozenMapping(tuple):
    """Hashable mapping snapshot stored as sorted ``(key, value)`` pairs."""

    __slots__ = ()

    def as_dict(self) -> dict[Any, Any]:
        return dict(self)

    def __repr__(self) -> str:
        items = ", ".join(f"{key!r}: {value!r}" for key, value in self)
        return f"FrozenMapping({{{items}}})"


def freeze(value: Any) -> Hashable:
    """Return a hashable structural snapshot of ``value``.

    Pydantic models are dumped without ``None`` fields, so an unset filter
    and an explicit ``None`` produce the same key.
    """
    if isinstance(value, BaseModel):
        return freeze(value.model_dump(exclude_none=True))
    if isinstance(value, Mapping):
        return FrozenMapping(
            sorted(
                ((key, freeze(item)) for key, item in value.items()),
                key=lambda pair: repr(pair[0]),
            )
        )
    if isinstance(value, (list, tuple)) and not isinstance(value, FrozenMapping):
        return tuple(freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(item) for item in value)
    return value


def matches_prefix(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == tuple(prefix)


class QueryKeys:
    """Key factory for one entity namespace."""

    def __init__(self, namespace: str):
        self.namespace = namespace

    @property
    def all(self) -> QueryKey:
        return (self.namespace,)

    def lists(self) -> QueryKey:
        return (self.namespace, LIST_SCOPE)

    def list(self, filters: BaseModel | Mapping[str, Any] | None = None) -> QueryKey:
        return (*self.lists(), freeze(filters if filters is not None else {}))

    def details(self) -> QueryKey:
        return (self.namespace, DETAIL_SCOPE)

    def detail(self, record_id: object) -> QueryKey:
        return (*self.details(), str(record_id))


class ApplicationKeys(QueryKeys):
    """Application keys, plus the per-candidate scope."""

    def by_candidate(self, candidate_id: object) -> QueryKey:
        return (self.namespace, "candidate", str(candidate_id))


candidate_keys = QueryKeys("candidates")
job_keys = QueryKeys("jobs")
application_keys = ApplicationKeys("applications")
company_keys = QueryKeys("company-context")


def company_context_key(user_id: object) -> QueryKey:
    return (company_keys.namespace, str(user_id))


__all__ = [
    "ApplicationKeys",
    "DETAIL_SCOPE",
    "FrozenMapping",
    "LIST_SCOPE",
    "QueryKey",
    "QueryKeys",
    "application_keys",
    "candidate_keys",
    "company_context_key",
    "company_keys",
    "freeze",
    "job_keys",
    "matches_prefix",
]
