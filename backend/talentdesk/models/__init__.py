"""ORM models package exports."""

from talentdesk.models.application import JobApplication
from talentdesk.models.base import Base, BaseModel
from talentdesk.models.candidate import Candidate
from talentdesk.models.company import Company, Profile
from talentdesk.models.job import Job

__all__ = [
    "Base",
    "BaseModel",
    "Candidate",
    "Company",
    "Job",
    "JobApplication",
    "Profile",
]
