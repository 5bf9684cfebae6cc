"""Schema for the signed-in user's company."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CompanyContext(BaseModel):
    """Company the current user belongs to."""

    company_id: UUID
    company_name: str | None = None

    model_config = ConfigDict(frozen=True)


__all__ = ["CompanyContext"]
