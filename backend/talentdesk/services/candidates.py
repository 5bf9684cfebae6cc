"""Data access for candidates."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select

from talentdesk.models.candidate import Candidate
from talentdesk.schemas.candidate import CandidateFilters, CandidateResponse
from talentdesk.services.base import EntityService, search_clause

CANDIDATE_SEARCH_COLUMNS = (
    Candidate.first_name,
    Candidate.last_name,
    Candidate.email,
    Candidate.phone,
    Candidate.city,
    Candidate.country,
)


class CandidateService(EntityService[Candidate, CandidateResponse, CandidateFilters]):
    """Candidates of the current user's company."""

    model = Candidate
    response_schema = CandidateResponse
    filters_schema = CandidateFilters
    resource = "candidate"
    namespace = "candidates"

    def apply_filters(
        self, query: Select[Any], filters: CandidateFilters
    ) -> Select[Any]:
        """Narrow ``query`` by every present candidate filter."""
        matches_search = search_clause(CANDIDATE_SEARCH_COLUMNS, filters.search)
        if matches_search is not None:
            query = query.where(matches_search)
        if filters.experience_min is not None:
            query = query.where(Candidate.experience_years >= filters.experience_min)
        if filters.experience_max is not None:
            query = query.where(Candidate.experience_years <= filters.experience_max)
        if filters.remote_work_preference is not None:
            query = query.where(
                Candidate.remote_work_preference == filters.remote_work_preference
            )
        return query


__all__ = ["CANDIDATE_SEARCH_COLUMNS", "CandidateService"]
