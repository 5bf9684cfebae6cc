"""Schemas shared by every entity."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

ItemT = TypeVar("ItemT")

MAX_PAGE_SIZE = 1000


class ListResult(BaseModel, Generic[ItemT]):
    """One page of rows plus the exact count of the filtered set."""

    data: list[ItemT] = Field(default_factory=list)
    count: int | None = None

    model_config = ConfigDict(frozen=True)


class PageFilters(BaseModel):
    """Optional 1-based pagination shared by list filters."""

    page: int | None = Field(default=None, ge=1)
    limit: int | None = Field(default=None, ge=1, le=MAX_PAGE_SIZE)

    model_config = ConfigDict(frozen=True, extra="forbid")


__all__ = ["ItemT", "ListResult", "MAX_PAGE_SIZE", "PageFilters"]
