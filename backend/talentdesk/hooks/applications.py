"""Job application read and write handles."""

from __future__ import annotations

import uuid

from talentdesk.hooks.base import EntityHooks
from talentdesk.query.keys import application_keys
from talentdesk.query.mutation import ErrorCallback, Mutation, SuccessCallback
from talentdesk.query.observable import Observable, as_observable, computed
from talentdesk.query.observer import QueryObserver
from talentdesk.schemas.application import (
    CandidateApplicationResponse,
    JobApplicationCreate,
    JobApplicationFilters,
    JobApplicationResponse,
)


class ApplicationHooks(EntityHooks[JobApplicationResponse, JobApplicationFilters]):
    keys = application_keys
    related_prefixes = ((application_keys.namespace, "candidate"),)
    messages = {
        "create": "Candidate invited to Interview!",
        "update": "Application updated successfully!",
        "delete": "Application deleted successfully!",
    }

    def by_candidate(
        self, candidate_id: Observable[uuid.UUID | None] | uuid.UUID | None
    ) -> QueryObserver[uuid.UUID | None, list[CandidateApplicationResponse]]:
        """Observe a candidate's applications, e.g. to show existing invites."""
        candidate_id = as_observable(candidate_id)
        return QueryObserver(
            self.env.client,
            key_fn=application_keys.by_candidate,
            fetcher_fn=self.service.get_by_candidate_id,
            params=candidate_id,
            enabled=computed(
                lambda ready, current: bool(ready) and current is not None,
                self.env.company.is_ready,
                candidate_id,
            ),
        )

    def create(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[JobApplicationCreate, JobApplicationResponse]:
        """Invite a candidate; invalidates that candidate's applications and every list."""

        async def run(payload: JobApplicationCreate) -> JobApplicationResponse:
            company_id, created_by = await self._owner()
            return await self.service.create(
                payload, company_id=company_id, created_by=created_by
            )

        return self._mutation(
            run,
            lambda payload, result: [
                application_keys.by_candidate(payload.candidate_id),
                application_keys.lists(),
            ],
            "create",
            on_success,
            on_error,
        )


__all__ = ["ApplicationHooks"]
