"""Data access for job postings."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select

from talentdesk.models.job import Job
from talentdesk.schemas.job import JobFilters, JobResponse
from talentdesk.services.base import EntityService, search_clause

JOB_SEARCH_COLUMNS = (Job.title, Job.description, Job.location)


class JobService(EntityService[Job, JobResponse, JobFilters]):
    """Job postings of the current user's company."""

    model = Job
    response_schema = JobResponse
    filters_schema = JobFilters
    resource = "job"
    namespace = "jobs"

    def apply_filters(self, query: Select[Any], filters: JobFilters) -> Select[Any]:
        matches_search = search_clause(JOB_SEARCH_COLUMNS, filters.search)
        if matches_search is not None:
            query = query.where(matches_search)
        if filters.status is not None:
            query = query.where(Job.status == filters.status)
        if filters.work_format is not None:
            query = query.where(Job.work_format == filters.work_format)
        if filters.job_type is not None:
            query = query.where(Job.job_type == filters.job_type)
        return query


__all__ = ["JOB_SEARCH_COLUMNS", "JobService"]
