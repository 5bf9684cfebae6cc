"""Data access for job applications."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError

from talentdesk.core.metrics import db_query_timer
from talentdesk.models.application import JobApplication
from talentdesk.models.job import Job
from talentdesk.schemas.application import (
    CandidateApplicationResponse,
    JobApplicationFilters,
    JobApplicationResponse,
    JobSummary,
)
from talentdesk.services.base import EntityService


class JobApplicationService(
    EntityService[JobApplication, JobApplicationResponse, JobApplicationFilters]
):
    """Applications linking candidates to jobs."""

    model = JobApplication
    response_schema = JobApplicationResponse
    filters_schema = JobApplicationFilters
    resource = "job_application"
    namespace = "applications"

    def apply_filters(
        self, query: Select[Any], filters: JobApplicationFilters
    ) -> Select[Any]:
        if filters.candidate_id is not None:
            query = query.where(JobApplication.candidate_id == filters.candidate_id)
        if filters.job_id is not None:
            query = query.where(JobApplication.job_id == filters.job_id)
        if filters.status is not None:
            query = query.where(JobApplication.status == filters.status)
        return query

    async def get_by_candidate_id(
        self, candidate_id: uuid.UUID
    ) -> list[CandidateApplicationResponse]:
        """List a candidate's applications with a summary of each job.

        Args:
            candidate_id: Candidate primary key.

        Returns:
            Applications ordered newest first.
        """
        log = self._log("get_by_candidate_id", candidate_id=str(candidate_id))
        log.debug("Fetching applications for candidate")

        query = (
            select(JobApplication, Job)
            .join(Job, Job.id == JobApplication.job_id)
            .where(JobApplication.candidate_id == candidate_id)
            .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        )
        async with self._sessions() as session:
            try:
                with db_query_timer(f"{self.namespace}.select_by_candidate"):
                    rows = (await session.execute(query)).all()
            except SQLAlchemyError as exc:
                log.bind(error=str(exc)).error("Failed to fetch candidate applications")
                raise

        log.bind(rows=len(rows)).debug("Fetched applications for candidate")
        return [
            CandidateApplicationResponse(
                **self._to_response(application).model_dump(),
                job=JobSummary.model_validate(job),
            )
            for application, job in rows
        ]


__all__ = ["JobApplicationService"]
