"""Read and write handles shared by the entity hooks."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from typing import Any, Generic, NamedTuple, TypeVar

from pydantic import BaseModel

from talentdesk.core.exceptions import AuthError
from talentdesk.hooks.company import CompanyContextState
from talentdesk.policy.notifications import Notifier
from talentdesk.query.client import QueryClient
from talentdesk.query.keys import QueryKey, QueryKeys
from talentdesk.query.mutation import (
    ErrorCallback,
    FailureHandler,
    Mutation,
    SuccessCallback,
)
from talentdesk.query.observable import Observable, as_observable, computed
from talentdesk.query.observer import QueryObserver
from talentdesk.schemas.auth import AuthUser
from talentdesk.schemas.common import ListResult
from talentdesk.services.base import EntityService
from talentdesk.services.company import CompanyService

ResponseT = TypeVar("ResponseT", bound=BaseModel)
FiltersT = TypeVar("FiltersT", bound=BaseModel)


class UpdateArgs(NamedTuple):
    id: uuid.UUID
    changes: BaseModel


class HookEnvironment(NamedTuple):
    """Collaborators every hook needs."""

    client: QueryClient
    company: CompanyContextState
    company_service: CompanyService
    user: Observable[AuthUser | None]
    policy: FailureHandler | None
    notifier: Notifier | None
    offline: Callable[[], bool]


class EntityHooks(Generic[ResponseT, FiltersT]):
    """List, detail and write handles for one entity.

    Reads wait for the company context. Writes resolve the company id from
    the backend on every call and stamp the signed-in user as author.
    """

    keys: QueryKeys
    list_stale_time: float | None = None
    related_prefixes: tuple[QueryKey, ...] = ()
    messages: dict[str, str] = {}

    def __init__(
        self,
        env: HookEnvironment,
        service: EntityService[Any, ResponseT, FiltersT],
    ):
        self.env = env
        self.service = service

    def list(
        self,
        filters: Observable[FiltersT | None] | FiltersT | None = None,
        *,
        keep_previous_data: bool = True,
    ) -> QueryObserver[FiltersT | None, ListResult[ResponseT]]:
        """Observe a filtered list; page changes keep the previous page visible."""
        return QueryObserver(
            self.env.client,
            key_fn=self.keys.list,
            fetcher_fn=self.service.get_all,
            params=filters,
            enabled=self.env.company.is_ready,
            stale_time=self.list_stale_time,
            keep_previous_data=keep_previous_data,
        )

    def detail(
        self, record_id: Observable[uuid.UUID | None] | uuid.UUID | None
    ) -> QueryObserver[uuid.UUID | None, ResponseT]:
        """Observe one row; disabled until an id is present."""
        record_id = as_observable(record_id)
        return QueryObserver(
            self.env.client,
            key_fn=self.keys.detail,
            fetcher_fn=self.service.get_by_id,
            params=record_id,
            enabled=computed(
                lambda ready, current: bool(ready) and current is not None,
                self.env.company.is_ready,
                record_id,
            ),
        )

    async def _owner(self) -> tuple[uuid.UUID, uuid.UUID]:
        user = self.env.user.value
        if user is None:
            raise AuthError("User not authenticated", status=401)
        company_id = await self.env.company_service.resolve_company_id()
        return company_id, uuid.UUID(user.id)

    def _mutation(
        self,
        fn: Callable[[Any], Any],
        invalidates: Callable[[Any, Any], list[QueryKey]],
        message_key: str,
        on_success: SuccessCallback | None,
        on_error: ErrorCallback | None,
    ) -> Mutation[Any, Any]:
        return Mutation(
            self.env.client,
            fn,
            namespace=self.keys.namespace,
            invalidates=invalidates,
            policy=self.env.policy,
            notifier=self.env.notifier,
            success_message=self.messages.get(message_key),
            on_success=on_success,
            on_error=on_error,
            offline=self.env.offline,
        )

    def create(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[BaseModel, ResponseT]:
        """Insert a row for the current company; invalidates every list."""

        async def run(payload: BaseModel) -> ResponseT:
            company_id, created_by = await self._owner()
            return await self.service.create(
                payload, company_id=company_id, created_by=created_by
            )

        return self._mutation(
            run,
            lambda payload, result: [self.keys.lists()],
            "create",
            on_success,
            on_error,
        )

    def update(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[UpdateArgs, ResponseT]:
        """Patch a row; invalidates every list and that row's detail."""

        async def run(args: UpdateArgs) -> ResponseT:
            return await self.service.update(args.id, args.changes)

        return self._mutation(
            run,
            lambda args, result: [
                self.keys.lists(),
                self.keys.detail(args.id),
                *self.related_prefixes,
            ],
            "update",
            on_success,
            on_error,
        )

    def delete(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[uuid.UUID, None]:
        """Delete a row; invalidates every list and that row's detail."""

        async def run(record_id: uuid.UUID) -> None:
            await self.service.delete(record_id)

        return self._mutation(
            run,
            lambda record_id, result: [
                self.keys.lists(),
                self.keys.detail(record_id),
                *self.related_prefixes,
            ],
            "delete",
            on_success,
            on_error,
        )


__all__ = ["EntityHooks", "HookEnvironment", "UpdateArgs"]
