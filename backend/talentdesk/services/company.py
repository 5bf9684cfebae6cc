"""Resolve the company of the signed-in user."""

from __future__ import annotations

import uuid

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from talentdesk.core.exceptions import CompanyContextError
from talentdesk.core.metrics import db_query_timer
from talentdesk.db.session import SessionProvider
from talentdesk.models.company import Company, Profile
from talentdesk.schemas.company import CompanyContext


class CompanyService:
    """Tenant lookups backing the company context and every write."""

    def __init__(self, sessions: SessionProvider):
        self._sessions = sessions

    async def get_context(self, user_id: uuid.UUID | str) -> CompanyContext:
        """Load the company linked to a user's profile.

        Args:
            user_id: Auth user id, which is also the profile id.

        Returns:
            The user's company id and name.

        Raises:
            CompanyContextError: If the profile has no company.
        """
        user_uuid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(user_id)
        log = logger.bind(
            service=self.__class__.__name__,
            operation="get_context",
            user_id=str(user_uuid),
        )
        log.debug("Loading company context")

        query = (
            select(Profile.company_id, Company.name)
            .select_from(Profile)
            .outerjoin(Company, Company.id == Profile.company_id)
            .where(Profile.id == user_uuid)
        )
        async with self._sessions() as session:
            try:
                with db_query_timer("profiles.select_company"):
                    row = (await session.execute(query)).first()
            except SQLAlchemyError as exc:
                log.bind(error=str(exc)).error("Failed to load company context")
                raise

        if row is None:
            log.warning("Profile not found")
            raise CompanyContextError("Profile not found.")
        if row.company_id is None:
            log.warning("User has no company")
            raise CompanyContextError("No company is linked to this user.")
        log.bind(company_id=str(row.company_id)).info("Loaded company context")
        return CompanyContext(company_id=row.company_id, company_name=row.name)

    async def resolve_company_id(self) -> uuid.UUID:
        """Ask the backend which company the current session belongs to.

        Runs the ``get_user_company_id()`` database function on every call.

        Raises:
            CompanyContextError: If the function returns no company.
        """
        log = logger.bind(service=self.__class__.__name__, operation="resolve_company_id")
        async with self._sessions() as session:
            try:
                with db_query_timer("rpc.get_user_company_id"):
                    company_id = (
                        await session.execute(select(func.get_user_company_id()))
                    ).scalar_one_or_none()
            except SQLAlchemyError as exc:
                log.bind(error=str(exc)).error("Failed to resolve company id")
                raise

        if company_id is None:
            log.warning("Backend returned no company id")
            raise CompanyContextError("Could not resolve the current user's company.")
        return company_id if isinstance(company_id, uuid.UUID) else uuid.UUID(str(company_id))


__all__ = ["CompanyService"]
