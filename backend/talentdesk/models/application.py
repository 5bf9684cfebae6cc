"""Job application ORM model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from talentdesk.models.base import BaseModel, utcnow
from talentdesk.models.enums import APPLICATION_STATUSES, validate_choice


class JobApplication(BaseModel):
    """A candidate invited to, or applying for, a job."""

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint(
            "candidate_id", "job_id", name="uq_job_applications_candidate_job"
        ),
        Index("ix_job_applications_candidate_id", "candidate_id"),
        Index("ix_job_applications_job_id", "job_id"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    candidate_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False
    )
    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    applied_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utcnow
    )

    @validates("status")
    def validate_status(self, key: str, value: str) -> str:
        """Validate supported application statuses."""
        if value is None:
            raise ValueError("status cannot be null")
        return validate_choice(key, value, APPLICATION_STATUSES)
