"""Per-entity read and write handles bound to the session context."""

from talentdesk.hooks.applications import ApplicationHooks
from talentdesk.hooks.base import EntityHooks, HookEnvironment, UpdateArgs
from talentdesk.hooks.candidates import CandidateHooks
from talentdesk.hooks.company import CompanyContextState
from talentdesk.hooks.jobs import JobHooks

__all__ = [
    "ApplicationHooks",
    "CandidateHooks",
    "CompanyContextState",
    "EntityHooks",
    "HookEnvironment",
    "JobHooks",
    "UpdateArgs",
]
