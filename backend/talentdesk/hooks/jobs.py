"""Job read and write handles."""

from talentdesk.hooks.base import EntityHooks
from talentdesk.query.keys import job_keys
from talentdesk.schemas.job import JobFilters, JobResponse

JOB_LIST_STALE_TIME_SECONDS = 60.0


class JobHooks(EntityHooks[JobResponse, JobFilters]):
    """Job lists stay fresh for a minute."""

    keys = job_keys
    list_stale_time = JOB_LIST_STALE_TIME_SECONDS
    messages = {
        "create": "Job created successfully!",
        "update": "Job updated successfully!",
        "delete": "Job deleted successfully!",
    }


__all__ = ["JOB_LIST_STALE_TIME_SECONDS", "JobHooks"]
