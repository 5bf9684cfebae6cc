"""Company context of the signed-in user."""

from __future__ import annotations

import math
import uuid

from talentdesk.query.client import QueryClient
from talentdesk.query.keys import company_context_key
from talentdesk.query.observable import Observable, computed
from talentdesk.query.observer import QueryObserver
from talentdesk.schemas.auth import AuthUser
from talentdesk.schemas.company import CompanyContext
from talentdesk.services.company import CompanyService


class CompanyContextState:
    """Load the company once per user and expose the ``is_ready`` gate.

    The result never goes stale; it is dropped only when the cache is
    cleared at sign-out. Reads of tenant data stay disabled until
    ``is_ready`` is true.
    """

    def __init__(
        self,
        client: QueryClient,
        service: CompanyService,
        user: Observable[AuthUser | None],
    ):
        self._user = user
        self.observer: QueryObserver[AuthUser | None, CompanyContext] = QueryObserver(
            client,
            key_fn=lambda current: company_context_key(
                current.id if current is not None else None
            ),
            fetcher_fn=lambda current: service.get_context(current.id),
            params=user,
            enabled=computed(lambda current: current is not None, user),
            stale_time=math.inf,
        )
        self.is_ready: Observable[bool] = Observable(self._compute_ready())
        self.observer.subscribe(lambda _: self.is_ready.set(self._compute_ready()))

    def _compute_ready(self) -> bool:
        return not self.observer.is_loading and self.company_id is not None

    @property
    def context(self) -> CompanyContext | None:
        return self.observer.data

    @property
    def company_id(self) -> uuid.UUID | None:
        context = self.context
        return context.company_id if context is not None else None

    @property
    def company_name(self) -> str | None:
        context = self.context
        return context.company_name if context is not None else None

    @property
    def is_loading(self) -> bool:
        return self.observer.is_loading

    @property
    def error(self):
        return self.observer.error

    async def wait(self) -> CompanyContext | None:
        return await self.observer.wait()

    def destroy(self) -> None:
        self.observer.destroy()


__all__ = ["CompanyContextState"]
