"""Pydantic schemas for job application filters and payloads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from talentdesk.models.enums import ApplicationStatus
from talentdesk.schemas.common import ListResult, PageFilters


class JobApplicationFilters(PageFilters):
    """Filters for listing job applications."""

    candidate_id: UUID | None = None
    job_id: UUID | None = None
    status: ApplicationStatus | None = None


class JobApplicationCreate(BaseModel):
    """Schema for inviting a candidate to a job."""

    candidate_id: UUID
    job_id: UUID
    status: ApplicationStatus = "new"
    notes: str | None = None
    applied_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class JobApplicationUpdate(BaseModel):
    """Schema for moving an application through the pipeline."""

    status: ApplicationStatus | None = None
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")


class JobSummary(BaseModel):
    """Subset of job columns embedded in a candidate's application list."""

    id: UUID
    title: str
    location: str | None = None
    status: str | None = None
    work_format: str | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class JobApplicationResponse(BaseModel):
    """Schema returned for persisted application rows."""

    id: UUID
    company_id: UUID
    created_by: UUID
    candidate_id: UUID
    job_id: UUID
    status: str
    notes: str | None
    applied_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, frozen=True)


class CandidateApplicationResponse(JobApplicationResponse):
    """Application row joined with the job it targets."""

    job: JobSummary | None = Field(default=None)


JobApplicationListResponse = ListResult[JobApplicationResponse]

__all__ = [
    "CandidateApplicationResponse",
    "JobApplicationCreate",
    "JobApplicationFilters",
    "JobApplicationListResponse",
    "JobApplicationResponse",
    "JobApplicationUpdate",
    "JobSummary",
]
