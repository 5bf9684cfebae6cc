"""Job ORM model."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from talentdesk.models.base import BaseModel, StringList
from talentdesk.models.enums import (
    JOB_STATUSES,
    JOB_TYPES,
    SALARY_PERIODS,
    WORK_FORMATS,
    validate_choice,
)


class Job(BaseModel):
    """An open (or past) position of the company."""

    __tablename__ = "jobs"
    __table_args__ = (
        Index("ix_jobs_company_id", "company_id"),
        Index("ix_jobs_status", "status"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    client_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True, default="open")
    job_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    work_format: Mapped[str] = mapped_column(String(20), nullable=False, default="onsite")
    skills: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)
    salary_min: Mapped[float | None] = mapped_column(
        Numeric(asdecimal=False), nullable=True
    )
    salary_max: Mapped[float | None] = mapped_column(
        Numeric(asdecimal=False), nullable=True
    )
    salary_currency: Mapped[str | None] = mapped_column(String(8), nullable=True)
    salary_period: Mapped[str | None] = mapped_column(String(16), nullable=True)
    min_experience_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_experience_period: Mapped[str | None] = mapped_column(String(16), nullable=True)

    @validates("status")
    def validate_status(self, key: str, value: str | None) -> str | None:
        """Validate supported job statuses."""
        return validate_choice(key, value, JOB_STATUSES)

    @validates("job_type")
    def validate_job_type(self, key: str, value: str | None) -> str | None:
        return validate_choice(key, value, JOB_TYPES)

    @validates("work_format")
    def validate_work_format(self, key: str, value: str | None) -> str | None:
        return validate_choice(key, value, WORK_FORMATS)

    @validates("salary_period")
    def validate_salary_period(self, key: str, value: str | None) -> str | None:
        return validate_choice(key, value, SALARY_PERIODS)
