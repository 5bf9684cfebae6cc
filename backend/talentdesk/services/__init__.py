"""Data access services, one per backend table."""

from talentdesk.services.applications import JobApplicationService
from talentdesk.services.base import EntityService, page_range, search_clause
from talentdesk.services.candidates import CandidateService
from talentdesk.services.company import CompanyService
from talentdesk.services.jobs import JobService

__all__ = [
    "CandidateService",
    "CompanyService",
    "EntityService",
    "JobApplicationService",
    "JobService",
    "page_range",
    "search_clause",
]
