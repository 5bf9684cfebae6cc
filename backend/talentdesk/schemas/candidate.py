"""Pydantic schemas for candidate filters and payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from talentdesk.models.enums import SalaryPeriod, VisaStatus, WorkFormat
from talentdesk.schemas.common import ListResult, PageFilters


class CandidateFilters(PageFilters):
    """Filters for listing candidates. All present fields must match."""

    search: str | None = None
    experience_min: int | None = Field(default=None, ge=0)
    experience_max: int | None = Field(default=None, ge=0)
    remote_work_preference: WorkFormat | None = None

    @model_validator(mode="after")
    def check_experience_range(self) -> Self:
        if (
            self.experience_min is not None
            and self.experience_max is not None
            and self.experience_min > self.experience_max
        ):
            raise ValueError("experience_min cannot exceed experience_max")
        return self


class _CandidateFields(BaseModel):
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=64)
    city: str | None = Field(default=None, max_length=255)
    country: str | None = Field(default=None, max_length=255)
    current_position: str | None = Field(default=None, max_length=255)
    current_company: str | None = Field(default=None, max_length=255)
    education: str | None = None
    experience_years: int | None = Field(default=None, ge=0, le=80)
    skills: list[str] | None = None
    languages: list[str] | None = None
    remote_work_preference: WorkFormat | None = None
    relocation_willingness: bool | None = None
    visa_status: VisaStatus | None = None
    availability_date: date | None = None
    notice_period: str | None = Field(default=None, max_length=64)
    expected_salary_min: float | None = Field(default=None, ge=0)
    expected_salary_max: float | None = Field(default=None, ge=0)
    salary_currency: str | None = Field(default=None, max_length=8)
    salary_period: SalaryPeriod | None = None
    linkedin_url: str | None = None
    github_url: str | None = None
    resume_url: str | None = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_salary_range(self) -> Self:
        if (
            self.expected_salary_min is not None
            and self.expected_salary_max is not None
            and self.expected_salary_min > self.expected_salary_max
        ):
            raise ValueError("expected_salary_min cannot exceed expected_salary_max")
        return self


class CandidateCreate(_CandidateFields):
    """Schema for creating a candidate; tenant fields are added by the caller."""


class CandidateUpdate(_CandidateFields):
    """Schema for partially updating a candidate."""


class CandidateResponse(BaseModel):
    """Schema returned for persisted candidate rows."""

    id: UUID
    company_id: UUID
    created_by: UUID
    created_at: datetime
    updated_at: datetime
    first_name: str | None
    last_name: str | None
    email: str | None
    phone: str | None
    city: str | None
    country: str | None
    current_position: str | None
    current_company: str | None
    education: str | None
    experience_years: int | None
    skills: list[str] | None
    languages: list[str] | None
    remote_work_preference: str | None
    relocation_willingness: bool | None
    visa_status: str | None
    availability_date: date | None
    notice_period: str | None
    expected_salary_min: float | None
    expected_salary_max: float | None
    salary_currency: str | None
    salary_period: str | None
    linkedin_url: str | None
    github_url: str | None
    resume_url: str | None

    model_config = ConfigDict(from_attributes=True, frozen=True)


CandidateListResponse = ListResult[CandidateResponse]

__all__ = [
    "CandidateCreate",
    "CandidateFilters",
    "CandidateListResponse",
    "CandidateResponse",
    "CandidateUpdate",
]
