"""Candidate read and write handles."""

from talentdesk.hooks.base import EntityHooks
from talentdesk.query.keys import candidate_keys
from talentdesk.schemas.candidate import CandidateFilters, CandidateResponse


class CandidateHooks(EntityHooks[CandidateResponse, CandidateFilters]):
    keys = candidate_keys
    messages = {
        "create": "Candidate created successfully!",
        "update": "Candidate updated successfully!",
        "delete": "Candidate deleted successfully!",
    }


__all__ = ["CandidateHooks"]
