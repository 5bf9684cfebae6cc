"""Candidate ORM model."""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, validates

from talentdesk.models.base import BaseModel, StringList
from talentdesk.models.enums import (
    REMOTE_WORK_PREFERENCES,
    SALARY_PERIODS,
    VISA_STATUSES,
    validate_choice,
)


class Candidate(BaseModel):
    """A person in the company's talent pool."""

    __tablename__ = "candidates"
    __table_args__ = (
        Index("ix_candidates_company_id", "company_id"),
        Index("ix_candidates_created_at", "created_at"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True)
    country: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    education: Mapped[str | None] = mapped_column(Text, nullable=True)
    experience_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    skills: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)
    languages: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)
    remote_work_preference: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )
    relocation_willingness: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    visa_status: Mapped[str | None] = mapped_column(String(40), nullable=True)
    availability_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notice_period: Mapped[str | None] = mapped_column(String(64), nullable=True)
    expected_salary_min: Mapped[float | None] = mapped_column(
        Numeric(asdecimal=False), nullable=True
    )
    expected_salary_max: Mapped[float | None] = mapped_column(
        Numeric(asdecimal=False), nullable=True
    )
    salary_currency: Mapped[str | None] = mapped_column(String(8), nullable=True)
    salary_period: Mapped[str | None] = mapped_column(String(16), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    resume_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    @validates("remote_work_preference")
    def validate_remote_work_preference(self, key: str, value: str | None) -> str | None:
        """Validate supported remote work preferences."""
        return validate_choice(key, value, REMOTE_WORK_PREFERENCES)

    @validates("visa_status")
    def validate_visa_status(self, key: str, value: str | None) -> str | None:
        """Validate supported visa statuses."""
        return validate_choice(key, value, VISA_STATUSES)

    @validates("salary_period")
    def validate_salary_period(self, key: str, value: str | None) -> str | None:
        return validate_choice(key, value, SALARY_PERIODS)

    @validates("skills", "languages")
    def validate_string_list(
        self, key: str, value: list[str] | None
    ) -> list[str] | None:
        """Validate list columns as lists of non-empty strings."""
        if value is None:
            return value

        if not isinstance(value, list):
            raise ValueError(f"Invalid {key} payload: expected a list of strings.")

        invalid_items = [
            item for item in value if not isinstance(item, str) or not item.strip()
        ]
        if invalid_items:
            raise ValueError(
                f"Invalid {key} payload: each item must be a non-empty string."
            )

        return value
