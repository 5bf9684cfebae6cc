"""Shared building blocks for the per-entity data access services."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from loguru import logger
from pydantic import BaseModel as Schema
from sqlalchemy import ColumnElement, Select, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from talentdesk.core.exceptions import RecordNotFoundError
from talentdesk.core.metrics import db_query_timer
from talentdesk.db.session import SessionProvider
from talentdesk.models.base import BaseModel
from talentdesk.schemas.common import ListResult, PageFilters

ModelT = TypeVar("ModelT", bound=BaseModel)
ResponseT = TypeVar("ResponseT", bound=Schema)
FiltersT = TypeVar("FiltersT", bound=PageFilters)

LIKE_ESCAPE = "\\"

PROTECTED_FIELDS = frozenset({"id", "company_id", "created_by", "created_at", "updated_at"})


def page_range(page: int | None, limit: int | None) -> tuple[int, int] | None:
    """Return the inclusive ``(from, to)`` row range of a 1-based page.

    Args:
        page: Page number starting at 1.
        limit: Page size.

    Returns:
        The row range, or ``None`` unless both values are given.

    Raises:
        ValueError: If page or limit is below 1.
    """
    if page is None or limit is None:
        return None
    if page < 1:
        raise ValueError("page must be at least 1")
    if limit < 1:
        raise ValueError("limit must be at least 1")
    start = (page - 1) * limit
    return start, start + limit - 1


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def search_clause(
    columns: Sequence[InstrumentedAttribute[Any]], term: str | None
) -> ColumnElement[bool] | None:
    """Build a case-insensitive substring OR-match over ``columns``.

    Returns ``None`` for a missing or blank term.
    """
    if term is None or not term.strip():
        return None
    pattern = f"%{escape_like(term.strip())}%"
    return or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns))


class EntityService(Generic[ModelT, ResponseT, FiltersT]):
    """CRUD over one tenant-scoped table.

    Subclasses set the class attributes and narrow ``apply_filters``.
    Backend errors are logged and re-raised unchanged.
    """

    model: type[ModelT]
    response_schema: type[ResponseT]
    filters_schema: type[FiltersT]
    resource: str
    namespace: str

    def __init__(self, sessions: SessionProvider):
        """Initialize the service.

        Args:
            sessions: Returns an async context manager yielding a session.
        """
        self._sessions = sessions
        self._column_names = {column.key for column in self.model.__table__.columns}

    def apply_filters(self, query: Select[Any], filters: FiltersT) -> Select[Any]:
        return query

    def _log(self, operation: str, **context: Any):
        return logger.bind(service=self.__class__.__name__, operation=operation, **context)

    async def _rollback_safely(self, session: AsyncSession) -> None:
        try:
            await session.rollback()
        except SQLAlchemyError as exc:
            self._log("rollback").bind(error=str(exc)).error("Rollback failed")

    def _to_response(self, entity: ModelT) -> ResponseT:
        return self.response_schema.model_validate(entity)

    async def get_all(self, filters: FiltersT | None = None) -> ListResult[ResponseT]:
        """List rows matching every present filter, newest first.

        Args:
            filters: Filter values; ``None`` lists everything visible.

        Returns:
            The requested page and the exact count of the filtered set.
        """
        filters = filters if filters is not None else self.filters_schema()
        log = self._log("get_all", filters=filters.model_dump(exclude_none=True))
        log.debug(f"Fetching {self.namespace}")

        filtered = self.apply_filters(select(self.model), filters)
        count_query = select(func.count()).select_from(filtered.subquery())
        rows_query = filtered.order_by(
            self.model.created_at.desc(), self.model.id.desc()
        )
        bounds = page_range(filters.page, filters.limit)
        if bounds is not None:
            start, end = bounds
            rows_query = rows_query.offset(start).limit(end - start + 1)

        async with self._sessions() as session:
            try:
                with db_query_timer(f"{self.namespace}.select"):
                    rows = (await session.execute(rows_query)).scalars().all()
                    count = (await session.execute(count_query)).scalar_one()
            except SQLAlchemyError as exc:
                log.bind(error=str(exc)).error(f"Failed to fetch {self.namespace}")
                raise

        log.bind(rows=len(rows), count=count).debug(f"Fetched {self.namespace}")
        return ListResult[self.response_schema](
            data=[self._to_response(row) for row in rows],
            count=count,
        )

    async def _load(self, session: AsyncSession, record_id: uuid.UUID) -> ModelT:
        result = await session.execute(
            select(self.model).where(self.model.id == record_id)
        )
        entity = result.scalar_one_or_none()
        if entity is None:
            raise RecordNotFoundError(self.resource, record_id)
        return entity

    async def get_by_id(self, record_id: uuid.UUID) -> ResponseT:
        """Fetch one row.

        Raises:
            RecordNotFoundError: If no visible row has this id.
        """
        log = self._log("get_by_id", id=str(record_id))
        async with self._sessions() as session:
            try:
                with db_query_timer(f"{self.namespace}.select_one"):
                    entity = await self._load(session, record_id)
            except RecordNotFoundError:
                log.warning(f"{self.resource} not found")
                raise
            except SQLAlchemyError as exc:
                log.bind(error=str(exc)).error(f"Failed to fetch {self.resource}")
                raise
        return self._to_response(entity)

    async def create(
        self,
        payload: Schema,
        *,
        company_id: uuid.UUID,
        created_by: uuid.UUID,
    ) -> ResponseT:
        """Insert a row owned by ``company_id``.

        Args:
            payload: Validated create schema.
            company_id: Tenant resolved for the current user.
            created_by: Auth user id of the author.

        Returns:
            The persisted row.
        """
        log = self._log("create", company_id=str(company_id))
        log.info(f"Creating {self.resource}")

        values = payload.model_dump(exclude_none=True)
        entity = self.model(**values, company_id=company_id, created_by=created_by)
        async with self._sessions() as session:
            session.add(entity)
            try:
                with db_query_timer(f"{self.namespace}.insert"):
                    await session.commit()
                    await session.refresh(entity)
            except SQLAlchemyError as exc:
                await self._rollback_safely(session)
                log.bind(error=str(exc)).error(f"Failed to create {self.resource}")
                raise

        log.bind(id=str(entity.id)).info(f"Created {self.resource}")
        return self._to_response(entity)

    async def update(self, record_id: uuid.UUID, payload: Schema) -> ResponseT:
        """Apply the fields set on ``payload`` to an existing row.

        Raises:
            RecordNotFoundError: If no visible row has this id.
            ValueError: If the payload names a protected or unknown column.
        """
        log = self._log("update", id=str(record_id))
        log.info(f"Updating {self.resource}")

        changes = payload.model_dump(exclude_unset=True)
        for field in changes:
            if field in PROTECTED_FIELDS:
                raise ValueError(f"Cannot update protected field: {field}")
            if field not in self._column_names:
                raise ValueError(f"Unknown field for {self.resource}: {field}")

        async with self._sessions() as session:
            try:
                with db_query_timer(f"{self.namespace}.update"):
                    entity = await self._load(session, record_id)
                    for field, value in changes.items():
                        setattr(entity, field, value)
                    await session.commit()
                    await session.refresh(entity)
            except RecordNotFoundError:
                log.warning(f"{self.resource} not found for update")
                raise
            except SQLAlchemyError as exc:
                await self._rollback_safely(session)
                log.bind(error=str(exc)).error(f"Failed to update {self.resource}")
                raise

        log.info(f"Updated {self.resource}")
        return self._to_response(entity)

    async def delete(self, record_id: uuid.UUID) -> None:
        """Delete exactly one row.

        Raises:
            RecordNotFoundError: If no row was affected.
        """
        log = self._log("delete", id=str(record_id))
        log.info(f"Deleting {self.resource}")

        async with self._sessions() as session:
            try:
                with db_query_timer(f"{self.namespace}.delete"):
                    result = await session.execute(
                        delete(self.model).where(self.model.id == record_id)
                    )
                    if result.rowcount != 1:
                        await self._rollback_safely(session)
                        raise RecordNotFoundError(self.resource, record_id)
                    await session.commit()
            except RecordNotFoundError:
                log.warning(f"{self.resource} not found for delete")
                raise
            except SQLAlchemyError as exc:
                await self._rollback_safely(session)
                log.bind(error=str(exc)).error(f"Failed to delete {self.resource}")
                raise

        log.info(f"Deleted {self.resource}")


__all__ = [
    "EntityService",
    "PROTECTED_FIELDS",
    "escape_like",
    "page_range",
    "search_clause",
]
