"""Pydantic schemas for job filters and payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from talentdesk.models.enums import JobStatus, JobType, SalaryPeriod, WorkFormat
from talentdesk.schemas.common import ListResult, PageFilters


class JobFilters(PageFilters):
    """Filters for listing jobs."""

    search: str | None = None
    status: JobStatus | None = None
    work_format: WorkFormat | None = None
    job_type: JobType | None = None


class _SalaryRangeMixin(BaseModel):
    salary_min: float | None = Field(default=None, ge=0)
    salary_max: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_salary_range(self) -> Self:
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min cannot exceed salary_max")
        return self


class JobCreate(_SalaryRangeMixin):
    """Schema for creating a job posting."""

    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    requirements: str | None = None
    location: str | None = Field(default=None, max_length=255)
    status: JobStatus = "open"
    job_type: JobType | None = None
    work_format: WorkFormat = "onsite"
    client_id: UUID | None = None
    skills: list[str] | None = None
    salary_currency: str | None = Field(default=None, max_length=8)
    salary_period: SalaryPeriod | None = None
    min_experience_value: int | None = Field(default=None, ge=0)
    min_experience_period: str | None = Field(default=None, max_length=16)

    model_config = ConfigDict(extra="forbid")


class JobUpdate(_SalaryRangeMixin):
    """Schema for partially updating a job posting."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    requirements: str | None = None
    location: str | None = Field(default=None, max_length=255)
    status: JobStatus | None = None
    job_type: JobType | None = None
    work_format: WorkFormat | None = None
    client_id: UUID | None = None
    skills: list[str] | None = None
    salary_currency: str | None = Field(default=None, max_length=8)
    salary_period: SalaryPeriod | None = None
    min_experience_value: int | None = Field(default=None, ge=0)
    min_experience_period: str | None = Field(default=None, max_length=16)

    model_config = ConfigDict(extra="forbid")


class JobResponse(BaseModel):
    """Schema returned for persisted job rows."""

    id: UUID
    company_id: UUID
    created_by: UUID
    created_at: datetime
    updated_at: datetime
    client_id: UUID | None
    title: str
    description: str | None
    requirements: str | None
    location: str | None
    status: str | None
    job_type: str | None
    work_format: str
    skills: list[str] | None
    salary_min: float | None
    salary_max: float | None
    salary_currency: str | None
    salary_period: str | None
    min_experience_value: int | None
    min_experience_period: str | None

    model_config = ConfigDict(from_attributes=True, frozen=True)


JobListResponse = ListResult[JobResponse]

__all__ = [
    "JobCreate",
    "JobFilters",
    "JobListResponse",
    "JobResponse",
    "JobUpdate",
]
