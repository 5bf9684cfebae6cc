"""Company and profile ORM models used to resolve the tenant of a user."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from talentdesk.models.base import BaseModel


class Company(BaseModel):
    """Tenant owning candidates, jobs and applications."""

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Profile(BaseModel):
    """Per-user profile; ``id`` is the auth user id."""

    __tablename__ = "profiles"

    company_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("companies.id", name="profiles_company_id_fkey"),
        nullable=True,
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

